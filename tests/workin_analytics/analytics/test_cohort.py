"""Tests for analytics.cohort — areas, readiness indicators, cohort rollup."""
from datetime import timedelta

import pytest

from workin_analytics.analytics.cohort import (
    CAREER_AREA_RULES,
    POSITION_AREA_RULES,
    aggregate_cohort,
    derive_area,
    map_to_area,
    preparation_indicators,
    top_areas,
)
from workin_analytics.config import UNSPECIFIED_ENTITY


# ---------------------------------------------------------------------------
# Area mapping
# ---------------------------------------------------------------------------

class TestAreaMapping:

    @pytest.mark.parametrize('career, area', [
        ('Ingeniería de Sistemas', 'Tecnología'),
        ('Ingenieria de Software', 'Tecnología'),
        ('Administración de Empresas', 'Administración y Negocios'),
        ('Ingeniería Industrial', 'Ingeniería'),
        ('Ciencias de la Comunicación', 'Comunicación y Marketing'),
        ('Psicología', 'Recursos Humanos'),
        ('DERECHO', 'Legal'),
        ('Economía', 'Finanzas'),
        ('Arquitectura', 'Otros'),
        ('', 'Otros'),
    ])
    def test_career_rules(self, career, area):
        assert map_to_area(career, CAREER_AREA_RULES) == area

    @pytest.mark.parametrize('position, area', [
        ('Desarrollador Backend', 'Tecnología'),
        ('Coordinador de Proyectos', 'Administración y Negocios'),
        ('Analista de RRHH', 'Recursos Humanos'),
        ('Community Manager - Social Media', 'Comunicación y Marketing'),
        ('Ejecutivo Comercial', 'Ventas'),
        ('Técnico de Mantenimiento', 'Ingeniería'),
        ('Chef', 'Otros'),
    ])
    def test_position_rules(self, position, area):
        assert map_to_area(position, POSITION_AREA_RULES) == area

    def test_career_takes_precedence(self, make_member):
        member = make_member(career='Derecho', position='Desarrollador', interested_roles=['Ventas'])
        assert derive_area(member) == 'Legal'

    def test_position_then_first_role(self, make_member):
        assert derive_area(make_member(position='Programador')) == 'Tecnología'
        assert derive_area(make_member(interested_roles=['Asistente Contable', 'Programador'])) == 'Otros'
        assert derive_area(make_member(interested_roles=['Analista de Finanzas'])) == 'Finanzas'

    def test_no_fields_is_other(self, make_member):
        assert derive_area(make_member()) == 'Otros'


class TestTopAreas:

    def test_top_three_by_count(self, make_member):
        members = [
            make_member(career='Ingeniería de Sistemas'),
            make_member(career='Ingeniería de Software'),
            make_member(position='Desarrollador Frontend'),
            make_member(career='Administración'),
            make_member(career='Negocios Internacionales'),
            make_member(career='Derecho'),
        ]
        areas = top_areas(members)
        assert [(a.area, a.count, a.percentage) for a in areas] == [
            ('Tecnología', 3, 50),
            ('Administración y Negocios', 2, 33),
            ('Legal', 1, 17),
        ]

    def test_ties_broken_by_name(self, make_member):
        members = [make_member(career='Psicología'), make_member(career='Derecho'), make_member()]
        assert [a.area for a in top_areas(members)] == ['Legal', 'Otros', 'Recursos Humanos']

    def test_counts_never_exceed_population(self, make_member):
        members = [make_member(career=c) for c in ['Derecho', 'Derecho', 'Economía', 'Psicología', 'Arte']]
        areas = top_areas(members)
        assert sum(a.count for a in areas) <= len(members)
        assert sum(a.percentage for a in areas) <= 100

    def test_empty(self):
        assert top_areas([]) == []


# ---------------------------------------------------------------------------
# preparation_indicators
# ---------------------------------------------------------------------------

class TestPreparationIndicators:

    def test_indicators(self, make_member, make_event):
        aligned = make_member(
            id='a', has_cv=True, cv_data_integrated=True, skills=['Python'], cv_experience=True,
        )
        partial = make_member(id='b', has_cv=True, skills=['Excel'])
        events = [
            make_event('a', tool='interview-simulation'),
            make_event('a', tool='interview-simulation'),
            make_event('b', tool='interview-simulation'),
            make_event('b', tool='job-match'),
            make_event('b', tool='job-match'),
        ]
        result = preparation_indicators([aligned, partial], events)
        assert result.cv_aligned_percentage == 50
        assert result.high_performance_interviews_percentage == 50
        assert result.job_match_percentage == 50

    def test_empty_population(self):
        result = preparation_indicators([], [])
        assert result.cv_aligned_percentage == 0
        assert result.job_match_percentage == 0


# ---------------------------------------------------------------------------
# aggregate_cohort
# ---------------------------------------------------------------------------

class TestAggregateCohort:

    def test_rollup(self, now, make_member, make_event):
        members = [
            make_member(id='a', has_cv=True, profile_completed=True, onboarding_completed=True,
                        career='Ingeniería de Sistemas',
                        registered_at=now - timedelta(days=60), last_activity_at=now - timedelta(days=1)),
            make_member(id='b', has_cv=True, registered_at=now - timedelta(days=45)),
            make_member(id='c'),
        ]
        events = (
            [make_event('a', tool='cv-review') for _ in range(8)]
            + [make_event('a', tool='job-match'), make_event('a', tool='interview-simulation')]
            + [make_event('b', tool='cv-creation')]
            + [make_event('outsider', tool='job-match') for _ in range(5)]
        )
        metrics = aggregate_cohort(members, events, now, entity='Universidad de Lima')

        assert metrics.university_name == 'Universidad de Lima'
        assert metrics.generated_at == now
        assert metrics.students_evaluated == 3
        assert metrics.cv_analyzed == 8
        assert metrics.job_searches == 1
        assert metrics.interviews_simulated == 1
        assert metrics.cv_created == 1
        assert metrics.students_with_cv == 2
        assert metrics.profile_completed == 1
        assert metrics.onboarding_completed == 1
        assert metrics.activity_level.power_users == 1
        assert metrics.activity_level.new_users == 1
        assert metrics.activity_level.inactive_users == 1
        assert metrics.activity_level.active_users == 0
        assert metrics.retention.total_cohort == 3
        assert metrics.top_areas[0].area == 'Otros'
        assert metrics.preparation_indicators.job_match_percentage == 33

    def test_empty_cohort(self, now):
        metrics = aggregate_cohort([], [], now)
        assert metrics.university_name == UNSPECIFIED_ENTITY
        assert metrics.students_evaluated == 0
        assert metrics.top_areas == []
        assert metrics.retention.day30 == 0

    def test_to_dict_serializes_timestamp(self, now, make_member):
        data = aggregate_cohort([make_member()], [], now, entity='UTP').to_dict()
        assert data['generated_at'] == now.isoformat()
        assert data['activity_level'] == {
            'inactive_users': 1, 'new_users': 0, 'active_users': 0, 'power_users': 0,
        }
