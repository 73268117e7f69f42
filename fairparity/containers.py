from dataclasses import dataclass
from typing import Dict, List, Optional
import numpy as np
import pandas as pd


@dataclass(frozen=True)
class ConfusionCounts:
    tp: int   #Ŷ=1, Y=1
    fp: int   #Ŷ=1, Y=0
    tn: int   #Ŷ=0, Y=0
    fn: int   #Ŷ=0, Y=1

    @property
    def n(self) -> int:
        return self.tp + self.fp + self.tn + self.fn


@dataclass
class BarChart:
    labels: List[str]          #reference group first
    values: List[float]
    value_label: str
    orientation: str = "horizontal"


@dataclass
class DensityChart:
    grid: np.ndarray                         #score axis, [0, 1]
    densities: Dict[str, np.ndarray]         #group -> density over grid
    x_label: str = "Predicted probabilities"


@dataclass
class RocChart:
    curves: Dict[str, pd.DataFrame]          #group -> columns fpr, tpr
    auc: Dict[str, float]
    x_label: str = "False positive rate"
    y_label: str = "True positive rate"


@dataclass
class ParityResults:
    metric: str
    label: str
    base: str
    cutoff: Optional[float]
    values: pd.Series          #normalized, indexed by group
    raw: pd.Series             #unnormalized per-group metric
    confusion: pd.DataFrame    #group, n, TP, FP, TN, FN
    metric_plot: BarChart
    probability_plot: Optional[DensityChart] = None
    roc_plot: Optional[RocChart] = None

    @property
    def metric_map(self) -> Dict[str, float]:
        return {str(k): float(v) for k, v in self.values.items()}


@dataclass
class NormalizedInputs:
    y_true: np.ndarray                 #0 = preds_levels[0], 1 = preds_levels[1]
    y_pred: np.ndarray
    groups: np.ndarray                 #group labels as str
    levels: List[str]                  #observed group levels, natural order
    scores: Optional[np.ndarray] = None
