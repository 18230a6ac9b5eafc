"""
Preprocessing for the subtype expression analysis:
1. Truncate expression sample ids to patient barcodes
2. Inner join with classified patients
3. log2(x + 1) transform of the gene panel
4. Split by subtype
"""

from typing import Dict, List

import numpy as np
import pandas as pd

import config
from classify_subtypes import truncate_index
from logger import get_logger

log = get_logger(__name__)


def drop_duplicate_patients(df: pd.DataFrame, label: str) -> pd.DataFrame:
    """
    Keep the first row for every patient barcode.

    Several samples of one patient collapse onto the same barcode after
    truncation; which one survives is not meaningful, only that it is stable.
    """
    duplicated = df.index.duplicated(keep='first')
    if duplicated.any():
        log.warning(
            "%s: %d rows share a patient barcode after truncation; keeping the first",
            label, duplicated.sum()
        )
    return df[~duplicated]


def join_expression(patients: pd.DataFrame, expression: pd.DataFrame) -> pd.DataFrame:
    """
    Inner join classified patients with expression rows on patient barcode.

    Args:
        patients: Output of classify_patients (indexed by patient barcode)
        expression: Samples x genes, indexed by sample barcode

    Returns:
        Joined DataFrame with the patient columns followed by gene columns
    """
    patients = drop_duplicate_patients(truncate_index(patients), 'clinical')
    expression = drop_duplicate_patients(truncate_index(expression), 'expression')

    overlap = [c for c in patients.columns if c in expression.columns]
    if overlap:
        raise ValueError(f"Expression table has clinical column names: {overlap}")

    joined = patients.join(expression, how='inner')
    log.info(
        "Joined %d patients (clinical: %d, expression: %d)",
        len(joined), len(patients), len(expression)
    )
    return joined


def check_panel(df: pd.DataFrame, genes: List[str] = config.GENE_PANEL):
    """Raise KeyError if any panel gene is missing from df."""
    missing = [g for g in genes if g not in df.columns]
    if missing:
        raise KeyError(f"Genes not found in expression data: {missing}")


def log_transform(df: pd.DataFrame, genes: List[str] = config.GENE_PANEL) -> pd.DataFrame:
    """
    Apply log2(x + 1) to the panel genes. Other columns are left untouched.

    The +1 offset keeps zero TPM at zero instead of -inf.
    """
    check_panel(df, genes)

    values = df[genes].apply(pd.to_numeric)
    if (values < 0).any().any():
        negative = values.columns[(values < 0).any()].tolist()
        raise ValueError(f"Negative expression values for: {negative}")

    df = df.copy()
    df[genes] = np.log2(values + 1)
    return df


def split_by_subtype(
    df: pd.DataFrame,
    subtypes: List[str] = config.SUBTYPES
) -> Dict[str, pd.DataFrame]:
    """Split the joined table into one DataFrame per subtype label."""
    groups = {subtype: df[df['Status'] == subtype] for subtype in subtypes}
    for subtype, group in groups.items():
        log.info("  %s: %d patients", subtype, len(group))
    return groups


def prepare_analysis_table(
    patients: pd.DataFrame,
    expression: pd.DataFrame,
    genes: List[str] = config.GENE_PANEL
) -> pd.DataFrame:
    """
    Join and transform, keeping only the patient columns and the panel.

    Args:
        patients: Classified patients
        expression: Samples x genes
        genes: Gene panel, target gene first

    Returns:
        Joined table with log2(x + 1) panel values
    """
    log.info("Preparing analysis table for %d genes", len(genes))

    joined = join_expression(patients, expression)
    check_panel(joined, genes)
    joined = joined[list(patients.columns) + list(genes)]

    return log_transform(joined, genes)
