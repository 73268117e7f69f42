"""
Metric extractors for parity analysis.

Each confusion-matrix metric is a pure function of a ConfusionCounts and
returns nan when its denominator is zero. ROC AUC works on scores instead
and is computed from ranks (Mann-Whitney U).
"""
import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional
import numpy as np
from scipy.stats import rankdata
from .containers import ConfusionCounts


def _ratio(num: int, den: int) -> float:
    return float(num / den) if den > 0 else float("nan")


def accuracy(cm: ConfusionCounts) -> float:
    return _ratio(cm.tp + cm.tn, cm.n)


def positive_count(cm: ConfusionCounts) -> float:
    #raw count of predicted positives, not a rate
    return float(cm.tp + cm.fp)


def positive_rate(cm: ConfusionCounts) -> float:
    return _ratio(cm.tp + cm.fp, cm.n)


def sensitivity(cm: ConfusionCounts) -> float:
    return _ratio(cm.tp, cm.tp + cm.fn)


def precision(cm: ConfusionCounts) -> float:
    return _ratio(cm.tp, cm.tp + cm.fp)


def false_negative_rate(cm: ConfusionCounts) -> float:
    return _ratio(cm.fn, cm.tp + cm.fn)


def false_positive_rate(cm: ConfusionCounts) -> float:
    return _ratio(cm.fp, cm.tn + cm.fp)


def negative_predictive_value(cm: ConfusionCounts) -> float:
    return _ratio(cm.tn, cm.tn + cm.fn)


def specificity(cm: ConfusionCounts) -> float:
    return _ratio(cm.tn, cm.tn + cm.fp)


def matthews_corrcoef(cm: ConfusionCounts) -> float:
    den = (cm.tp + cm.fp) * (cm.tp + cm.fn) * (cm.tn + cm.fp) * (cm.tn + cm.fn)
    if den == 0:
        return float("nan")
    return float((cm.tp * cm.tn - cm.fp * cm.fn) / math.sqrt(den))


def roc_auc(y_true: np.ndarray, scores: np.ndarray) -> float:
    """
    Area under the ROC curve via the rank-sum statistic.

    Equivalent to trapezoidal integration of the (FPR, TPR) polyline over
    every achievable threshold; tied scores get average ranks. nan when
    either class is absent.
    """
    y = np.asarray(y_true).astype(int)
    s = np.asarray(scores, dtype=float)
    n_pos = int(y.sum())
    n_neg = len(y) - n_pos
    if n_pos == 0 or n_neg == 0:
        return float("nan")
    ranks = rankdata(s)
    u = ranks[y == 1].sum() - n_pos * (n_pos + 1) / 2.0
    return float(u / (n_pos * n_neg))


@dataclass(frozen=True)
class ParityMetric:
    name: str
    label: str                                              #axis label for the bar chart
    func: Optional[Callable[[ConfusionCounts], float]]      #None for score-based metrics
    needs_scores: bool = False


PARITY_METRICS: Dict[str, ParityMetric] = {
    m.name: m
    for m in (
        ParityMetric("accuracy", "Accuracy Parity", accuracy),
        ParityMetric("demographic", "Demographic Parity", positive_count),
        ParityMetric("proportional", "Proportional Parity", positive_rate),
        ParityMetric("equalized_odds", "Equalized Odds", sensitivity),
        ParityMetric("predictive_rate", "Predictive Rate Parity", precision),
        ParityMetric("fnr", "FNR Parity", false_negative_rate),
        ParityMetric("fpr", "FPR Parity", false_positive_rate),
        ParityMetric("npv", "NPV Parity", negative_predictive_value),
        ParityMetric("specificity", "Specificity Parity", specificity),
        ParityMetric("mcc", "MCC Parity", matthews_corrcoef),
        ParityMetric("roc_auc", "ROC AUC Parity", None, needs_scores=True),
    )
}


def get_metric(name: str) -> ParityMetric:
    try:
        return PARITY_METRICS[name]
    except KeyError:
        raise ValueError(f"Unknown parity metric '{name}'; use one of: {', '.join(PARITY_METRICS)}") from None
