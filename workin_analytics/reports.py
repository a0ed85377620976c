"""
Plain-text employability report for one university cohort.

Output depends only on the CohortMetrics passed in, so the same metrics always
render the same bytes.
"""
from typing import List

from workin_analytics.analytics.rates import rounded_percentage

RULE = '=' * 65


def _share(count: int, total: int) -> str:
    return f"{count} ({rounded_percentage(count, total)}%)"


def _top_area_lines(metrics) -> List[str]:
    if not metrics.top_areas:
        return ['Sin datos de áreas']
    return [
        f"{index}. {area.area}: {area.count} estudiantes ({area.percentage}%)"
        for index, area in enumerate(metrics.top_areas, start=1)
    ]


def render_text_report(metrics) -> str:
    total = metrics.students_evaluated
    prep = metrics.preparation_indicators
    activity = metrics.activity_level
    retention = metrics.retention

    lines = [
        f"REPORTE DE EMPLEABILIDAD - {metrics.university_name.upper()}",
        f"Generado: {metrics.generated_at.strftime('%d/%m/%Y')}",
        RULE,
        '',
        'MÉTRICAS PRINCIPALES:',
        f"• Estudiantes evaluados: {total}",
        f"• Búsquedas de trabajo: {metrics.job_searches}",
        f"• CVs analizados con IA: {metrics.cv_analyzed}",
        f"• Entrevistas simuladas: {metrics.interviews_simulated}",
        f"• CVs creados: {metrics.cv_created}",
        '',
        'PREPARACIÓN LABORAL:',
        f"• Estudiantes con CV: {_share(metrics.students_with_cv, total)}",
        f"• Perfiles completados: {_share(metrics.profile_completed, total)}",
        f"• Onboarding completado: {_share(metrics.onboarding_completed, total)}",
        '',
        f"TOP {len(metrics.top_areas)} ÁREAS MÁS DEMANDADAS:" if metrics.top_areas else 'ÁREAS MÁS DEMANDADAS:',
        *_top_area_lines(metrics),
        '',
        'INDICADORES DE PREPARACIÓN LABORAL:',
        f"• CV alineado al formato ideal: {prep.cv_aligned_percentage}%",
        f"• Entrevistas simuladas con desempeño alto: {prep.high_performance_interviews_percentage}%",
        f"• Nivel de match con vacantes disponibles: {prep.job_match_percentage}%",
        '',
        'NIVEL DE ACTIVIDAD:',
        f"• Power users: {activity.power_users}",
        f"• Usuarios activos: {activity.active_users}",
        f"• Usuarios nuevos: {activity.new_users}",
        f"• Usuarios inactivos: {activity.inactive_users}",
        '',
        f"RETENCIÓN (cohorte de {retention.total_cohort} estudiantes):",
        f"• Día 1: {round(retention.day1, 1)}%",
        f"• Día 7: {round(retention.day7, 1)}%",
        f"• Día 30: {round(retention.day30, 1)}%",
        '',
        RULE,
        'Nota: Datos extraídos de MyWorkIn',
    ]
    return '\n'.join(lines)
