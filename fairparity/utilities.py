import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
import numpy as np
import pandas as pd
from scipy.stats import gaussian_kde
from sklearn.metrics import confusion_matrix, roc_curve
from .containers import ConfusionCounts, DensityChart, NormalizedInputs, RocChart
from .errors import DimensionMismatchError, InvalidBaseGroupError, MissingArgumentError


logger = logging.getLogger(__name__)

DEFAULT_PREDS_LEVELS = ("no", "yes")
DEFAULT_CUTOFF = 0.5
DENSITY_GRID_SIZE = 200


#---- Input normalization ----

_ARRAY_LIKE = (list, tuple, np.ndarray, pd.Series, pd.Index, pd.Categorical)


def _in_columns(data: Optional[pd.DataFrame], col: Any) -> bool:
    if data is None:
        return False
    try:
        return col in data.columns
    except TypeError:
        #unhashable, so not a column label
        return False


def _resolve_column(data: Optional[pd.DataFrame], col: Any, role: str) -> pd.Series:
    """
    Column label -> data[col]; a list, array or Series is taken as the values.
    Labels of any hashable type (str, int, tuple) are looked up first.
    """
    if _in_columns(data, col):
        return data[col].reset_index(drop=True)
    if isinstance(col, _ARRAY_LIKE):
        return pd.Series(col).reset_index(drop=True)
    if data is None:
        raise KeyError(f"Column {col!r} given for {role} but no data frame was supplied.")
    raise KeyError(f"Column {col!r} not found in data.")


def _group_label(value: Any) -> str:
    #integral floats come from int columns upcast by missing values
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def _natural_levels(s: pd.Series) -> list:
    observed = s.dropna()
    if isinstance(s.dtype, pd.CategoricalDtype):
        present = set(observed.unique())
        return [c for c in s.cat.categories if c in present]
    uniq = list(pd.unique(observed))
    try:
        return sorted(uniq)
    except TypeError:
        return sorted(uniq, key=str)


def _binary_mapping(s: pd.Series, preds_levels: Sequence[Any], role: str) -> Dict[Any, int]:
    """
    Map the raw levels of a binary column onto 0 (negative) / 1 (positive).

    Values already named by `preds_levels` keep that order, 0/1 and
    False/True map to themselves, anything else follows natural order
    (first level negative).
    """
    levels = _natural_levels(s)
    if len(levels) > 2:
        raise ValueError(f"{role} must be binary; found {len(levels)} levels: {levels[:5]}")

    neg, pos = preds_levels
    if set(levels) <= {neg, pos}:
        return {neg: 0, pos: 1}
    if all(isinstance(v, (bool, int, float, np.bool_, np.integer, np.floating)) and v in (0, 1) for v in levels):
        return {0: 0, 1: 1}
    if len(levels) == 2:
        return {levels[0]: 0, levels[1]: 1}
    raise ValueError(
        f"Cannot tell whether the single {role} level {levels[0]!r} is negative or positive; "
        f"name it in preds_levels."
    )


def _apply_mapping(s: pd.Series, mapping: Dict[Any, int]) -> np.ndarray:
    return np.array([mapping[v] for v in s.astype(object)], dtype=int)


def normalize_inputs(
    data: Optional[pd.DataFrame],
    outcome: Any,
    group: Any,
    probs: Any = None,
    preds: Any = None,
    preds_levels: Sequence[str] = DEFAULT_PREDS_LEVELS,
    cutoff: float = DEFAULT_CUTOFF,
) -> NormalizedInputs:
    """
    Align outcome, prediction and group columns to one 0/1 + str encoding.

    Predicted probabilities take precedence over predicted labels and are
    binarized with `prob >= cutoff`. Rows with a missing value in any of
    the three columns are dropped.
    """
    if probs is None and preds is None:
        raise MissingArgumentError("Either preds (predicted labels) or probs (predicted probabilities) must be supplied.")
    if probs is not None and preds is not None:
        logger.warning("Both preds and probs supplied; using probs with cutoff=%s.", cutoff)
    if len(preds_levels) != 2:
        raise ValueError("preds_levels must name exactly two levels (negative, positive).")

    y_raw = _resolve_column(data, outcome, "outcome")
    g_raw = _resolve_column(data, group, "group")
    if probs is not None:
        p_raw = _resolve_column(data, probs, "probs")
    else:
        p_raw = _resolve_column(data, preds, "preds")

    #check lengths
    if not (len(y_raw) == len(p_raw) == len(g_raw)):
        raise DimensionMismatchError(
            "Outcomes, predictions/probabilities and group status must be of the same length "
            f"(got {len(y_raw)}, {len(p_raw)}, {len(g_raw)})."
        )

    #Drop incomplete observations
    complete = (y_raw.notna() & p_raw.notna() & g_raw.notna()).to_numpy()
    if not complete.all():
        logger.warning("Dropping %d observation(s) with missing outcome, prediction or group.", int((~complete).sum()))
        y_raw, p_raw, g_raw = (s[complete].reset_index(drop=True) for s in (y_raw, p_raw, g_raw))
    if len(y_raw) == 0:
        raise ValueError("No complete observations to evaluate.")

    outcome_map = _binary_mapping(y_raw, preds_levels, "outcome")
    y_true = _apply_mapping(y_raw, outcome_map)

    scores = None
    if probs is not None:
        if not pd.api.types.is_numeric_dtype(p_raw) or pd.api.types.is_bool_dtype(p_raw):
            raise ValueError("probs must be numeric predicted probabilities.")
        if not 0.0 <= cutoff <= 1.0:
            raise ValueError(f"cutoff must lie in [0, 1]; got {cutoff}.")
        scores = p_raw.to_numpy(dtype=float)
        if scores.min() < 0.0 or scores.max() > 1.0:
            raise ValueError("probs must lie in [0, 1].")
        y_pred = (scores >= cutoff).astype(int)
    else:
        #Predicted labels share the outcome's coding when they use the same raw levels
        if set(_natural_levels(p_raw)) <= set(outcome_map):
            pred_map = outcome_map
        else:
            pred_map = _binary_mapping(p_raw, preds_levels, "preds")
        y_pred = _apply_mapping(p_raw, pred_map)

    #1 and "1" collapse to one level
    levels = list(dict.fromkeys(_group_label(level) for level in _natural_levels(g_raw)))
    groups = np.array([_group_label(v) for v in g_raw.astype(object)], dtype=object)

    return NormalizedInputs(y_true=y_true, y_pred=y_pred, groups=groups, levels=levels, scores=scores)


def resolve_base_group(levels: List[str], base: Any = None) -> Tuple[str, List[str]]:
    """Pick the base group (default: first level) and put it first."""
    if base is None:
        return levels[0], list(levels)
    key = _group_label(base)
    if key not in levels:
        raise InvalidBaseGroupError(f"Base group '{key}' not found among group levels {levels}.")
    return key, [key] + [level for level in levels if level != key]


#---- Confusion matrices ----

def confusion_counts(y_true: np.ndarray, y_pred: np.ndarray) -> ConfusionCounts:
    if len(y_true) == 0:
        return ConfusionCounts(tp=0, fp=0, tn=0, fn=0)
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
    return ConfusionCounts(tp=int(tp), fp=int(fp), tn=int(tn), fn=int(fn))


def confusion_frame(inputs: NormalizedInputs, levels: List[str], with_counts: bool = True) -> pd.DataFrame:
    """One row per group: n, pos_true, neg_true and (optionally) TP/FP/TN/FN."""
    rows = []
    for g in levels:
        mask = inputs.groups == g
        y_g = inputs.y_true[mask]
        row = {"group": g, "n": int(mask.sum()), "pos_true": int(y_g.sum()), "neg_true": int((y_g == 0).sum())}
        if with_counts:
            cm = confusion_counts(y_g, inputs.y_pred[mask])
            row.update({"TP": cm.tp, "FP": cm.fp, "TN": cm.tn, "FN": cm.fn})
        rows.append(row)
    return pd.DataFrame(rows)


#---- Parity normalization ----

def normalize_to_base(raw: pd.Series, base: str, label: str = "metric") -> pd.Series:
    """
    Divide each group's value by the base group's value.

    A zero or undefined base value makes every entry nan (not 1.0), so
    "no reference" stays distinguishable from "perfect parity".
    """
    base_val = float(raw.loc[base])
    if not np.isfinite(base_val) or base_val == 0.0:
        logger.warning("%s of base group '%s' is %s; parity values are undefined.", label, base, base_val)
        return pd.Series(np.nan, index=raw.index, dtype=float, name=raw.name)
    out = raw.astype(float) / base_val
    out.loc[base] = 1.0
    return out


#---- Distribution descriptors ----

def build_density_chart(inputs: NormalizedInputs, levels: List[str], grid_size: int = DENSITY_GRID_SIZE) -> DensityChart:
    grid = np.linspace(0.0, 1.0, grid_size)
    densities: Dict[str, np.ndarray] = {}
    for g in levels:
        s_g = inputs.scores[inputs.groups == g]
        #KDE needs at least two distinct values
        if np.unique(s_g).size < 2:
            densities[g] = np.full(grid_size, np.nan)
        else:
            densities[g] = gaussian_kde(s_g)(grid)
    return DensityChart(grid=grid, densities=densities)


def build_roc_chart(inputs: NormalizedInputs, levels: List[str], auc: Dict[str, float]) -> RocChart:
    curves: Dict[str, pd.DataFrame] = {}
    for g in levels:
        mask = inputs.groups == g
        y_g = inputs.y_true[mask]
        if np.unique(y_g).size < 2:
            curves[g] = pd.DataFrame({"fpr": [], "tpr": []})
            continue
        fpr, tpr, _ = roc_curve(y_g, inputs.scores[mask])
        curves[g] = pd.DataFrame({"fpr": fpr, "tpr": tpr})
    return RocChart(curves=curves, auc=dict(auc))
