import numpy as np
import pandas as pd
import pytest


def _make_synth_df(n=600, seed=0):
    rng = np.random.default_rng(seed)

    group = rng.choice(["A", "B", "C"], size=n, p=[0.5, 0.3, 0.2])
    y = rng.binomial(1, 0.4, size=n)

    # Scores informative about y, shifted up for group B
    logits = -0.4 + 1.5 * (y - 0.5) + rng.normal(0, 1, size=n) + (group == "B") * 0.5
    prob = 1 / (1 + np.exp(-logits))

    return pd.DataFrame(
        {
            "race": group,
            "outcome": np.where(y == 1, "yes", "no"),
            "prob": prob,
            "pred": np.where(prob >= 0.5, "yes", "no"),
        }
    )


def _scenario_df():
    return pd.DataFrame(
        {
            "outcome": ["yes", "no", "yes", "no", "yes", "no"],
            "pred": ["yes", "no", "no", "no", "yes", "yes"],
            "grp": ["A", "A", "A", "B", "B", "B"],
        }
    )


RATIO_FUNCS = ["acc_parity", "prop_parity", "equal_odds", "pred_rate_parity", "fnr_parity",
               "fpr_parity", "npv_parity", "spec_parity", "mcc_parity"]


def test_accuracy_parity_concrete_scenario():
    import fairparity as fp

    res = fp.acc_parity(_scenario_df(), outcome="outcome", group="grp", preds="pred", base="A")

    # A: TP, TN, FN -> 2/3 ; B: TN, TP, FP -> 2/3
    assert res.values["A"] == 1.0
    assert res.raw["A"] == pytest.approx(2 / 3)
    assert res.values["B"] == pytest.approx(res.raw["B"] / res.raw["A"])
    assert res.values["B"] == pytest.approx(1.0)

    cm = res.confusion.set_index("group")
    assert cm.loc["A", ["TP", "FP", "TN", "FN"]].tolist() == [1, 0, 1, 1]
    assert cm.loc["B", ["TP", "FP", "TN", "FN"]].tolist() == [1, 1, 1, 0]
    assert res.cutoff is None
    assert res.probability_plot is None


def test_base_group_is_one_for_every_variant():
    import fairparity as fp

    df = _make_synth_df(seed=1)
    for name in RATIO_FUNCS + ["dem_parity"]:
        res = getattr(fp, name)(df, outcome="outcome", group="race", probs="prob", base="B")
        assert res.base == "B"
        assert list(res.values.index)[0] == "B"
        assert res.values["B"] == 1.0, name

    roc = fp.roc_parity(df, outcome="outcome", group="race", probs="prob", base="B")
    assert roc.values["B"] == 1.0


def test_changing_base_only_rescales():
    import fairparity as fp

    df = _make_synth_df(seed=2)
    res_a = fp.equal_odds(df, outcome="outcome", group="race", probs="prob", base="A")
    res_c = fp.equal_odds(df, outcome="outcome", group="race", probs="prob", base="C")

    pd.testing.assert_series_equal(res_a.raw.sort_index(), res_c.raw.sort_index())
    assert res_a.values["B"] / res_a.values["C"] == pytest.approx(res_c.values["B"] / res_c.values["C"])
    assert res_c.values["A"] == pytest.approx(res_a.raw["A"] / res_a.raw["C"])


def test_identical_calls_are_identical():
    import fairparity as fp

    df = _make_synth_df(seed=3)
    first = fp.mcc_parity(df, outcome="outcome", group="race", probs="prob")
    second = fp.mcc_parity(df, outcome="outcome", group="race", probs="prob")

    pd.testing.assert_series_equal(first.values, second.values, check_exact=True)
    assert first.metric_map == second.metric_map


def test_degenerate_group_gives_nan_for_predictive_rate():
    import fairparity as fp

    df = pd.DataFrame(
        {
            "outcome": ["yes", "no", "yes", "no", "yes", "no"],
            "pred": ["yes", "no", "yes", "no", "no", "no"],
            "grp": ["A", "A", "A", "B", "B", "B"],
        }
    )
    res = fp.pred_rate_parity(df, outcome="outcome", group="grp", preds="pred")

    assert res.values["A"] == 1.0
    assert np.isnan(res.values["B"])
    assert np.isnan(res.raw["B"])


def test_all_correct_predictions():
    import fairparity as fp

    df = _make_synth_df(seed=4)
    df["pred"] = df["outcome"]

    for name in ["acc_parity", "equal_odds", "pred_rate_parity", "npv_parity", "spec_parity", "mcc_parity"]:
        res = getattr(fp, name)(df, outcome="outcome", group="race", preds="pred")
        assert (res.values == 1.0).all(), name

    # Zero error rate in the base group: parity is undefined, not perfect
    res = fp.fnr_parity(df, outcome="outcome", group="race", preds="pred")
    assert (res.raw == 0.0).all()
    assert res.values.isna().all()


def test_cutoff_changes_predictive_rate_parity():
    import fairparity as fp

    df = _make_synth_df(seed=5)
    low = fp.pred_rate_parity(df, outcome="outcome", group="race", probs="prob", cutoff=0.5)
    high = fp.pred_rate_parity(df, outcome="outcome", group="race", probs="prob", cutoff=0.9)

    assert low.cutoff == 0.5 and high.cutoff == 0.9
    assert not np.allclose(low.raw.to_numpy(), high.raw.to_numpy(), equal_nan=True)


def test_cutoff_is_inclusive():
    import fairparity as fp

    res = fp.prop_parity(
        None,
        outcome=["yes", "no", "yes", "no"],
        group=["A", "A", "B", "B"],
        probs=[0.5, 0.49, 0.5, 0.5],
    )
    assert res.raw["A"] == pytest.approx(0.5)
    assert res.raw["B"] == pytest.approx(1.0)
    assert res.values["B"] == pytest.approx(2.0)


def test_roc_parity_perfect_separator():
    import fairparity as fp

    df = pd.DataFrame(
        {
            "outcome": ["no", "no", "yes", "yes"] * 2,
            "prob": [0.1, 0.3, 0.6, 0.9, 0.2, 0.4, 0.5, 0.7],
            "grp": ["A"] * 4 + ["B"] * 4,
        }
    )
    res = fp.roc_parity(df, outcome="outcome", group="grp", probs="prob")

    assert (res.raw == 1.0).all()
    assert (res.values == 1.0).all()
    assert res.cutoff is None
    assert res.probability_plot is None
    assert set(res.roc_plot.curves) == {"A", "B"}
    assert res.roc_plot.auc["B"] == 1.0
    assert "TP" not in res.confusion.columns


def test_roc_parity_requires_probabilities():
    import fairparity as fp

    with pytest.raises(fp.MissingArgumentError):
        fp.parity(_scenario_df(), outcome="outcome", group="grp", metric="roc_auc", preds="pred")


def test_dimension_mismatch_raises():
    import fairparity as fp

    with pytest.raises(fp.DimensionMismatchError):
        fp.acc_parity(None, outcome=["yes", "no", "yes"], group=["A", "B"], preds=["yes", "no", "no"])

    # also a ValueError for callers that catch the broad type
    with pytest.raises(ValueError):
        fp.acc_parity(None, outcome=["yes", "no"], group=["A", "B"], preds=["yes"])


def test_missing_predictions_raises():
    import fairparity as fp

    with pytest.raises(fp.MissingArgumentError):
        fp.acc_parity(_scenario_df(), outcome="outcome", group="grp")


def test_unknown_base_group_raises():
    import fairparity as fp

    with pytest.raises(fp.InvalidBaseGroupError):
        fp.acc_parity(_scenario_df(), outcome="outcome", group="grp", preds="pred", base="Z")


def test_missing_column_raises_keyerror():
    import fairparity as fp

    with pytest.raises(KeyError):
        fp.acc_parity(_scenario_df(), outcome="outcome", group="sex", preds="pred")


def test_invalid_probabilities_and_levels_raise():
    import fairparity as fp

    df = _make_synth_df(n=50, seed=6)
    df.loc[0, "prob"] = 1.5
    with pytest.raises(ValueError):
        fp.acc_parity(df, outcome="outcome", group="race", probs="prob")

    df = _make_synth_df(n=50, seed=6)
    with pytest.raises(ValueError):
        fp.acc_parity(df, outcome="outcome", group="race", probs="prob", cutoff=1.2)

    df["outcome"] = np.resize(["a", "b", "c"], len(df))
    with pytest.raises(ValueError):
        fp.acc_parity(df, outcome="outcome", group="race", preds="pred")


def test_default_base_follows_natural_order():
    import fairparity as fp

    df = _make_synth_df(seed=7)
    res = fp.acc_parity(df, outcome="outcome", group="race", preds="pred")
    assert res.base == "A"
    assert list(res.values.index) == ["A", "B", "C"]

    df["race"] = pd.Categorical(df["race"], categories=["C", "B", "A"])
    res = fp.acc_parity(df, outcome="outcome", group="race", preds="pred")
    assert res.base == "C"
    assert res.metric_plot.labels == ["C", "B", "A"]


def test_numeric_levels_and_constant_predictions():
    import fairparity as fp

    df = pd.DataFrame(
        {
            "y": [1, 0, 1, 0, 1, 0],
            "yhat": [1, 1, 1, 1, 1, 1],
            "g": [1, 1, 1, 2, 2, 2],
        }
    )
    res = fp.pred_rate_parity(df, outcome="y", group="g", preds="yhat", base=2)

    # precision A = 2/3, B = 1/3
    assert res.base == "2"
    assert res.raw["1"] == pytest.approx(2 / 3)
    assert res.values["1"] == pytest.approx(2.0)


def test_demographic_parity_is_a_count():
    import fairparity as fp

    res = fp.dem_parity(_scenario_df(), outcome="outcome", group="grp", preds="pred")
    assert res.raw.tolist() == [1.0, 2.0]
    assert res.values["B"] == 2.0


def test_incomplete_rows_are_dropped():
    import fairparity as fp

    df = _scenario_df()
    df.loc[len(df)] = [None, "yes", "A"]
    res = fp.acc_parity(df, outcome="outcome", group="grp", preds="pred")

    assert res.confusion["n"].tolist() == [3, 3]


def test_probability_descriptor_present_with_scores():
    import fairparity as fp

    df = _make_synth_df(seed=8)
    res = fp.acc_parity(df, outcome="outcome", group="race", probs="prob")

    chart = res.probability_plot
    assert chart is not None
    assert set(chart.densities) == {"A", "B", "C"}
    assert chart.grid.min() == 0.0 and chart.grid.max() == 1.0
    assert all(np.all(np.isfinite(d)) for d in chart.densities.values())
    assert res.metric_plot.value_label == "Accuracy Parity"
    assert res.metric_plot.orientation == "horizontal"


def test_parity_report_and_confusion_by_group():
    import fairparity as fp

    df = _make_synth_df(seed=9)
    labels_only = fp.parity_report(df, outcome="outcome", group="race", preds="pred", base="C")
    with_scores = fp.parity_report(df, outcome="outcome", group="race", probs="prob", base="C")

    assert "roc_auc" not in labels_only.columns
    assert len(labels_only.columns) == 10
    assert "roc_auc" in with_scores.columns
    assert list(with_scores.index) == ["C", "A", "B"]
    assert (with_scores.loc["C"].dropna() == 1.0).all()

    cm = fp.confusion_by_group(df, outcome="outcome", group="race", preds="pred")
    assert (cm[["TP", "FP", "TN", "FN"]].sum(axis=1) == cm["n"]).all()
    assert cm["n"].sum() == len(df)


def test_integer_column_labels_are_looked_up():
    import fairparity as fp

    df = pd.DataFrame(
        {
            0: ["yes", "no", "yes", "no"],
            1: ["yes", "no", "no", "no"],
            2: ["A", "A", "B", "B"],
        }
    )
    res = fp.acc_parity(df, outcome=0, group=2, preds=1)

    assert res.metric_map == {"A": 1.0, "B": 0.5}
    assert res.confusion["n"].tolist() == [2, 2]

    with pytest.raises(KeyError):
        fp.acc_parity(df, outcome=0, group=3, preds=1)


def test_int_groups_with_missing_value_keep_int_labels():
    import fairparity as fp

    res = fp.acc_parity(
        None,
        outcome=["yes", "no", "yes", "no", "yes"],
        group=[1, 1, 2, 2, None],
        preds=["yes", "no", "no", "no", "yes"],
        base=1,
    )

    assert res.base == "1"
    assert list(res.values.index) == ["1", "2"]
    assert res.confusion["n"].tolist() == [2, 2]


def test_levels_with_same_label_are_merged():
    import fairparity as fp

    cm = fp.confusion_by_group(
        None,
        outcome=["yes", "no", "yes", "no"],
        group=[1, "1", 2, 2],
        preds=["yes", "no", "no", "no"],
    )

    assert cm["group"].tolist() == ["1", "2"]
    assert cm["n"].tolist() == [2, 2]


def test_probs_take_precedence_over_preds():
    import fairparity as fp

    df = _make_synth_df(seed=10)
    # labels that disagree with the scores everywhere
    df["pred"] = np.where(df["prob"] >= 0.5, "no", "yes")

    both = fp.pred_rate_parity(df, outcome="outcome", group="race", probs="prob", preds="pred")
    scores_only = fp.pred_rate_parity(df, outcome="outcome", group="race", probs="prob")

    pd.testing.assert_series_equal(both.raw, scores_only.raw)
    assert both.cutoff == 0.5
    assert both.probability_plot is not None


def test_density_is_nan_for_group_with_one_distinct_score():
    import fairparity as fp

    df = pd.DataFrame(
        {
            "outcome": ["yes", "no", "yes", "no", "yes", "no"],
            "prob": [0.8, 0.2, 0.6, 0.7, 0.7, 0.7],
            "grp": ["A", "A", "A", "B", "B", "B"],
        }
    )
    res = fp.acc_parity(df, outcome="outcome", group="grp", probs="prob")

    densities = res.probability_plot.densities
    assert np.all(np.isfinite(densities["A"]))
    assert np.all(np.isnan(densities["B"]))
