"""
Funnel builder.

A funnel is an ordered list of member-count checkpoints. Stage 0 is the
denominator for every percentage; output order is input order.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

from workin_analytics.analytics.rates import check_invariant, clamp_percentage, percentage

logger = logging.getLogger('analytics.funnel')


@dataclass
class StageDefinition:
    """A named checkpoint. count_fn receives the full member population."""
    label: str
    count_fn: Callable[[List[Any]], int]


@dataclass
class FunnelStage:
    label: str
    count: int
    percentage: float
    drop_off: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_funnel(stage_defs: Sequence[StageDefinition], members: Iterable[Any]) -> List[FunnelStage]:
    """Evaluate each stage against the population.

    percentage[i] = 100 * count[i] / count[0]  (0 when count[0] is 0)
    drop_off[i]   = count[0] - count[i]
    """
    population = list(members)
    counts = []
    for stage in stage_defs:
        count = int(stage.count_fn(population))
        if not check_invariant(count >= 0, "funnel stage %r has negative count %s", stage.label, count):
            count = 0
        counts.append(count)

    return _stages_from_counts([s.label for s in stage_defs], counts)


def funnel_from_counts(pairs: Sequence[Tuple[str, int]]) -> List[FunnelStage]:
    """Build a funnel from precomputed (label, count) pairs."""
    return build_funnel(
        [StageDefinition(label, (lambda _population, c=count: c)) for label, count in pairs],
        [],
    )


def _stages_from_counts(labels: List[str], counts: List[int]) -> List[FunnelStage]:
    if not counts:
        return []
    root = counts[0]
    stages = []
    for index, (label, count) in enumerate(zip(labels, counts)):
        if index == 0:
            stages.append(FunnelStage(label, count, 100.0 if root > 0 else 0.0, 0))
            continue
        check_invariant(
            count <= root, "funnel stage %r count %s exceeds root count %s", label, count, root,
        )
        stages.append(FunnelStage(
            label=label,
            count=count,
            percentage=clamp_percentage(percentage(count, root)),
            drop_off=root - count,
        ))
    return stages


# ── Activation funnel ────────────────────────────────────────────────────────

def activation_funnel_stages(reviews: Iterable[Any] = ()) -> List[StageDefinition]:
    """Registration → verification → onboarding → CV upload → first CV analysis."""
    reviewed_ids = {r.member_id for r in reviews if r.member_id}
    return [
        StageDefinition('Registrados', len),
        StageDefinition('Verificados', lambda ms: sum(1 for m in ms if m.verified)),
        StageDefinition('Onboarding Completo', lambda ms: sum(1 for m in ms if m.onboarding_completed)),
        StageDefinition('CV Subido', lambda ms: sum(1 for m in ms if m.has_cv)),
        StageDefinition('Primer Análisis', lambda ms: sum(1 for m in ms if m.id in reviewed_ids)),
    ]
