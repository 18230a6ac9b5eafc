"""
Classify breast-cancer patients into HER2+ and TNBC from IHC receptor status.

TNBC (Triple-Negative Breast Cancer) is defined as:
- ER negative (Estrogen Receptor)
- HER2 negative
- PR negative (Progesterone Receptor)

HER2+ is any non-TNBC patient with positive HER2 status. Everyone else is
labelled Other and left out of the downstream analysis.
"""

from typing import Iterable, Optional

import numpy as np
import pandas as pd

import config
from logger import get_logger

log = get_logger(__name__)


def truncate_barcode(sample_id: str, length: int = config.BARCODE_LENGTH) -> str:
    """
    Cut a TCGA sample barcode down to the patient barcode.

    'TCGA-A1-A0SB-01' -> 'TCGA-A1-A0SB'. Shorter identifiers are returned as is.
    """
    return sample_id[:length]


def truncate_index(df: pd.DataFrame, length: int = config.BARCODE_LENGTH) -> pd.DataFrame:
    """Copy of df with every index label truncated to a patient barcode."""
    df = df.copy()
    df.index = [truncate_barcode(str(s), length) for s in df.index]
    df.index.name = 'patient_id'
    return df


def normalize_status(value) -> Optional[str]:
    """Map a raw receptor status to 'Positive', 'Negative' or None."""
    if not isinstance(value, str):
        return None

    value = value.strip().lower()
    if value == config.POSITIVE.lower():
        return config.POSITIVE
    if value == config.NEGATIVE.lower():
        return config.NEGATIVE
    # Equivocal, Indeterminate, [Not Evaluated], ...
    return None


def extract_receptor_status(
    clinical: pd.DataFrame,
    samples: Optional[Iterable[str]] = None
) -> pd.DataFrame:
    """
    Pull the three receptor-status rows out of the wide clinical table.

    Args:
        clinical: Clinical variables (rows) x samples (columns)
        samples: Restrict to these sample columns; ids missing from the table
            are ignored

    Returns:
        DataFrame with one row per sample and columns ER, HER2, PR holding
        'Positive', 'Negative' or NaN
    """
    missing = [v for v in config.RECEPTOR_FIELDS if v not in clinical.index]
    if missing:
        raise KeyError(f"Clinical table lacks receptor variables: {missing}")

    receptors = clinical.loc[list(config.RECEPTOR_FIELDS)]
    if samples is not None:
        columns = [s for s in samples if s in receptors.columns]
        receptors = receptors[columns]

    status = receptors.T.rename(columns=config.RECEPTOR_FIELDS)
    status = status.apply(lambda col: col.map(normalize_status))
    status.index.name = 'sample_id'
    return status


def assign_subtype(status: pd.DataFrame) -> pd.DataFrame:
    """
    Add the TNBC flag and the Status label to complete receptor records.

    Rule:
        TNBC  <=> ER, HER2 and PR all Negative
        HER2+ <=> not TNBC and HER2 Positive
        Other otherwise
    """
    status = status.copy()

    tnbc = (
        (status['ER'] == config.NEGATIVE) &
        (status['HER2'] == config.NEGATIVE) &
        (status['PR'] == config.NEGATIVE)
    )
    her2 = ~tnbc & (status['HER2'] == config.POSITIVE)

    status['TNBC'] = tnbc
    status['Status'] = np.select(
        [tnbc, her2],
        [config.TNBC, config.HER2_POSITIVE],
        default=config.OTHER
    )
    return status


def classify_patients(
    clinical: pd.DataFrame,
    samples: Optional[Iterable[str]] = None,
    keep_other: bool = False
) -> pd.DataFrame:
    """
    Full classification step: extract, drop incomplete records, label and
    truncate identifiers to patient barcodes.

    Args:
        clinical: Wide clinical table (variables x samples)
        samples: Cohort sample ids to classify
        keep_other: Keep patients labelled Other (dropped by default)

    Returns:
        DataFrame indexed by patient barcode with columns
        ER, HER2, PR, TNBC, Status
    """
    status = extract_receptor_status(clinical, samples)
    n_total = len(status)

    complete = status.dropna(subset=list(config.RECEPTOR_FIELDS.values()))
    log.info(
        "Receptor status complete for %d of %d samples (%d dropped)",
        len(complete), n_total, n_total - len(complete)
    )

    labelled = assign_subtype(complete)
    counts = labelled['Status'].value_counts()
    for label in [config.HER2_POSITIVE, config.TNBC, config.OTHER]:
        log.info("  %s: %d", label, counts.get(label, 0))

    if not keep_other:
        labelled = labelled[labelled['Status'] != config.OTHER]

    return truncate_index(labelled)
