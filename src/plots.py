"""
Figures for the subtype expression analysis:
1. Boxplot of the target gene by subtype
2. Target gene vs each other panel gene, one scatterplot per subtype
"""

import os
from typing import Dict, List

import matplotlib
matplotlib.use('Agg')  # headless
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

import config
from logger import get_logger

log = get_logger(__name__)

SUBTYPE_COLORS = {
    config.HER2_POSITIVE: '#E74C3C',
    config.TNBC: '#3498DB'
}


def subtype_slug(subtype: str) -> str:
    """File-name safe subtype label: 'HER2+' -> 'HER2pos'."""
    return subtype.replace('+', 'pos').replace('-', 'neg')


def boxplot_filename(gene: str) -> str:
    return f'boxplot_{gene}_by_subtype.png'


def scatter_filename(subtype: str, target: str, gene: str) -> str:
    return f'scatter_{subtype_slug(subtype)}_{target}_vs_{gene}.png'


def plot_subtype_boxplot(
    df: pd.DataFrame,
    output_path: str,
    gene: str = config.TARGET_GENE,
    pvalue: float = None,
    subtypes: List[str] = config.SUBTYPES
):
    """Boxplot with overlaid points of one gene's log2 expression by subtype."""
    fig, ax = plt.subplots(figsize=(6, 6))

    data = df[df['Status'].isin(subtypes)]
    sns.boxplot(
        data=data, x='Status', y=gene, hue='Status', order=subtypes,
        palette=SUBTYPE_COLORS, showfliers=False, legend=False, ax=ax
    )
    sns.stripplot(
        data=data, x='Status', y=gene, order=subtypes,
        color='black', size=3, alpha=0.5, ax=ax
    )

    counts = data['Status'].value_counts()
    ax.set_xticks(range(len(subtypes)))
    ax.set_xticklabels([f"{s}\n(n={counts.get(s, 0)})" for s in subtypes])
    ax.set_xlabel('')
    ax.set_ylabel(f'{gene} log2(TPM + 1)', fontsize=12)

    title = f'{gene} expression by subtype'
    if pvalue is not None:
        title += f'\nWilcoxon rank-sum p = {pvalue:.3g}'
    ax.set_title(title, fontsize=14)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150)
    plt.close(fig)
    log.info("Saved: %s", output_path)


def plot_correlation_scatter(
    group: pd.DataFrame,
    target: str,
    gene: str,
    subtype: str,
    output_path: str,
    rho: float = None
):
    """Scatterplot of target vs gene within one subtype, with a linear fit."""
    fig, ax = plt.subplots(figsize=(6, 6))

    sns.regplot(
        data=group, x=target, y=gene, ax=ax,
        fit_reg=len(group) > 2,
        color=SUBTYPE_COLORS.get(subtype, 'gray'),
        scatter_kws={'s': 15, 'alpha': 0.6}
    )

    ax.set_xlabel(f'{target} log2(TPM + 1)', fontsize=12)
    ax.set_ylabel(f'{gene} log2(TPM + 1)', fontsize=12)

    title = f'{subtype}: {target} vs {gene} (n={len(group)})'
    if rho is not None:
        title += f'\nSpearman rho = {rho:.3f}'
    ax.set_title(title, fontsize=13)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150)
    plt.close(fig)
    log.debug("Saved: %s", output_path)


def plot_all_correlations(
    groups: Dict[str, pd.DataFrame],
    correlations: pd.DataFrame,
    figures_dir: str,
    genes: List[str] = config.GENE_PANEL,
    target: str = config.TARGET_GENE
) -> List[str]:
    """
    One scatterplot per (subtype, non-target gene).

    Returns:
        Paths of the written figures
    """
    os.makedirs(figures_dir, exist_ok=True)
    rho_lookup = correlations.set_index(['subtype', 'gene'])['rho']

    paths = []
    for subtype, group in groups.items():
        for gene in genes:
            if gene == target:
                continue
            rho = rho_lookup.get((subtype, gene))
            path = os.path.join(figures_dir, scatter_filename(subtype, target, gene))
            plot_correlation_scatter(group, target, gene, subtype, path, rho=rho)
            paths.append(path)

    log.info("Saved %d scatterplots to %s", len(paths), figures_dir)
    return paths
