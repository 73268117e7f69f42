from typing import Dict
from matplotlib import pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from .containers import BarChart, DensityChart, ParityResults, RocChart


sns.set_theme(style="whitegrid")

def plot_bar_chart(chart: BarChart):
    """Seaborn barplot of a parity descriptor, base group first."""
    fig, ax = plt.subplots()

    data = pd.DataFrame({"group": chart.labels, "value": chart.values})

    if chart.orientation == "horizontal":
        sns.barplot(data=data, x="value", y="group", order=chart.labels, alpha=0.5, ax=ax)
        ax.set_xlabel(chart.value_label)
        ax.set_ylabel("")
        #Parity reference line
        ax.axvline(1.0, linestyle="--", linewidth=0.8)
        ax.grid(True, axis="x", linestyle="--", linewidth=0.5)
    else:
        sns.barplot(data=data, x="group", y="value", order=chart.labels, alpha=0.5, ax=ax)
        ax.set_ylabel(chart.value_label)
        ax.set_xlabel("")
        ax.set_xticks(ax.get_xticks())
        ax.set_xticklabels(chart.labels, rotation=45, ha="right")
        ax.axhline(1.0, linestyle="--", linewidth=0.8)
        ax.grid(True, axis="y", linestyle="--", linewidth=0.5)

    sns.despine(ax=ax, left=False, bottom=False)
    fig.tight_layout()
    return fig

def plot_density_chart(chart: DensityChart):
    """
    One filled density curve per group over [0, 1].
    Groups whose density is undefined (fewer than two distinct scores) are skipped.
    """
    fig, ax = plt.subplots()

    for group, density in chart.densities.items():
        if np.all(np.isnan(density)):
            continue
        line, = ax.plot(chart.grid, density, label=group)
        ax.fill_between(chart.grid, density, color=line.get_color(), alpha=0.5)

    ax.set_xlim(0, 1)
    ax.set_xlabel(chart.x_label)
    ax.set_ylabel("Density")
    if ax.get_legend_handles_labels()[0]:
        ax.legend(title="")
    sns.despine(ax=ax, left=False, bottom=False)

    fig.tight_layout()
    return fig

def plot_roc_chart(chart: RocChart):
    fig, ax = plt.subplots()

    for group, curve in chart.curves.items():
        if curve.empty:
            continue
        ax.plot(curve["fpr"], curve["tpr"], label=f"{group} (AUC = {chart.auc[group]:.3f})")

    # Chance diagonal
    ax.plot([0, 1], [0, 1], linestyle="--", linewidth=0.8, color="grey")
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_xlabel(chart.x_label)
    ax.set_ylabel(chart.y_label)
    if ax.get_legend_handles_labels()[0]:
        ax.legend(title="", loc="lower right")
    sns.despine(ax=ax, left=False, bottom=False)

    fig.tight_layout()
    return fig

def render_plots(results: ParityResults) -> Dict[str, plt.Figure]:
    figs: Dict[str, plt.Figure] = {"metric_plot": plot_bar_chart(results.metric_plot)}
    if results.probability_plot is not None:
        figs["probability_plot"] = plot_density_chart(results.probability_plot)
    if results.roc_plot is not None:
        figs["roc_plot"] = plot_roc_chart(results.roc_plot)
    return figs
