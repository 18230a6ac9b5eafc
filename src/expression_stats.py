"""
Statistical tests on the log2 gene panel between HER2+ and TNBC patients.

- Mann-Whitney U (Wilcoxon rank-sum) test of the target gene across subtypes
- Spearman correlation of the target gene with every other panel gene,
  separately within each subtype, with Benjamini-Hochberg adjustment
- Panel-wide differential expression summary
"""

from dataclasses import dataclass, asdict
from typing import Dict, List

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.multitest import multipletests

import config
from logger import get_logger

log = get_logger(__name__)

MIN_CORRELATION_SAMPLES = 3


@dataclass
class RankSumResult:
    gene: str
    group_a: str
    group_b: str
    n_a: int
    n_b: int
    statistic: float
    pvalue: float

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(self)])


def _values(group: pd.DataFrame, gene: str) -> np.ndarray:
    return group[gene].dropna().to_numpy(dtype=float)


def rank_sum_test(
    groups: Dict[str, pd.DataFrame],
    gene: str = config.TARGET_GENE,
    group_a: str = config.HER2_POSITIVE,
    group_b: str = config.TNBC
) -> RankSumResult:
    """
    Two-sided Mann-Whitney U test of one gene between two subtype groups.

    Raises:
        ValueError: if either group has no values for the gene
    """
    a = _values(groups[group_a], gene)
    b = _values(groups[group_b], gene)
    if len(a) == 0 or len(b) == 0:
        raise ValueError(
            f"Rank-sum test needs both groups non-empty: "
            f"{group_a}={len(a)}, {group_b}={len(b)}"
        )

    statistic, pvalue = stats.mannwhitneyu(a, b, alternative='two-sided')
    result = RankSumResult(
        gene=gene, group_a=group_a, group_b=group_b,
        n_a=len(a), n_b=len(b),
        statistic=float(statistic), pvalue=float(pvalue)
    )
    log.info(
        "Rank-sum %s (%s n=%d vs %s n=%d): U=%.1f, p=%.3g",
        gene, group_a, result.n_a, group_b, result.n_b, result.statistic, result.pvalue
    )
    return result


def spearman(group: pd.DataFrame, x: str, y: str):
    """
    Spearman rho and p-value between two columns of one group.

    Rows missing either value are ignored. Fewer than three complete rows
    give NaN for both.
    """
    pair = group[[x, y]].dropna()
    if len(pair) < MIN_CORRELATION_SAMPLES:
        return np.nan, np.nan, len(pair)

    rho, pvalue = stats.spearmanr(pair[x], pair[y])
    return float(rho), float(pvalue), len(pair)


def correlate_with_target(
    groups: Dict[str, pd.DataFrame],
    genes: List[str] = config.GENE_PANEL,
    target: str = config.TARGET_GENE
) -> pd.DataFrame:
    """
    Spearman correlation of target with each other gene, per subtype.

    Returns:
        DataFrame with columns subtype, gene, target, n, rho, pvalue, padj.
        padj is the BH-adjusted p-value within each subtype.
    """
    others = [g for g in genes if g != target]
    rows = []

    for subtype, group in groups.items():
        for gene in others:
            rho, pvalue, n = spearman(group, target, gene)
            rows.append({
                'subtype': subtype,
                'gene': gene,
                'target': target,
                'n': n,
                'rho': rho,
                'pvalue': pvalue
            })

    results = pd.DataFrame(rows, columns=['subtype', 'gene', 'target', 'n', 'rho', 'pvalue'])
    results['padj'] = np.nan

    for subtype, idx in results.groupby('subtype').groups.items():
        pvals = results.loc[idx, 'pvalue']
        tested = pvals.notna()
        if tested.any():
            _, padj, _, _ = multipletests(pvals[tested], method='fdr_bh')
            results.loc[pvals[tested].index, 'padj'] = padj

    for _, row in results.iterrows():
        log.info(
            "  %s: %s vs %s rho=%.3f (n=%d)",
            row['subtype'], target, row['gene'], row['rho'], row['n']
        )
    return results


def calculate_fold_change(group1: np.ndarray, group2: np.ndarray) -> float:
    """Log2 fold change between two groups of log2 values."""
    # Data is log2 transformed, so fold change = difference of means
    return np.mean(group1) - np.mean(group2)


def panel_differential_expression(
    groups: Dict[str, pd.DataFrame],
    genes: List[str] = config.GENE_PANEL,
    group_a: str = config.HER2_POSITIVE,
    group_b: str = config.TNBC,
    alpha: float = 0.05
) -> pd.DataFrame:
    """
    Compare every panel gene between two subtypes.

    Args:
        groups: Output of split_by_subtype
        genes: Panel genes (log2 transformed)
        group_a: Numerator group of the fold change
        group_b: Denominator group of the fold change
        alpha: Significance threshold on the adjusted p-value

    Returns:
        DataFrame with mean_<group>, log2FoldChange, pvalue, padj and
        significant for every gene
    """
    results = []
    for gene in genes:
        a = _values(groups[group_a], gene)
        b = _values(groups[group_b], gene)

        if len(a) and len(b):
            _, p_value = stats.mannwhitneyu(a, b, alternative='two-sided')
            log2fc = calculate_fold_change(a, b)
        else:
            p_value, log2fc = np.nan, np.nan

        results.append({
            'gene': gene,
            f'mean_{group_a}': np.mean(a) if len(a) else np.nan,
            f'mean_{group_b}': np.mean(b) if len(b) else np.nan,
            'log2FoldChange': log2fc,
            'pvalue': p_value
        })

    deg_df = pd.DataFrame(results)

    # FDR correction (Benjamini-Hochberg)
    _, pvals_corrected, _, _ = multipletests(
        deg_df['pvalue'].fillna(1),
        alpha=alpha,
        method='fdr_bh'
    )
    deg_df['padj'] = pvals_corrected
    deg_df['significant'] = deg_df['padj'] < alpha

    log.info(
        "Panel genes differing between %s and %s (padj < %s): %d",
        group_a, group_b, alpha, deg_df['significant'].sum()
    )
    return deg_df
