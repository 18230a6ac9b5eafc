"""Select the breast-cancer cohort from the TCGA cancer-type sample list."""

import pandas as pd

import config
from logger import get_logger

log = get_logger(__name__)


def select_cohort(
    cancer_types: pd.DataFrame,
    marker: str = config.COHORT_MARKER,
    exact: bool = False
) -> pd.DataFrame:
    """
    Keep the samples whose cancer-type code matches marker.

    By default any code containing marker is kept, so unrelated codes that
    happen to contain the marker text are kept as well. Pass exact=True to
    require the whole code to equal marker.

    Args:
        cancer_types: DataFrame with 'sample_id' and 'cancer_type' columns
        marker: Cancer-type code to select
        exact: Compare whole codes instead of substrings

    Returns:
        Subset of cancer_types
    """
    codes = cancer_types['cancer_type']
    if exact:
        mask = codes == marker
    else:
        mask = codes.str.contains(marker, regex=False, na=False)

    cohort = cancer_types[mask]
    log.info("Cohort %s: %d of %d samples", marker, len(cohort), len(cancer_types))
    return cohort


def cohort_ids(cohort: pd.DataFrame) -> list:
    """Sample identifiers of a cohort, in file order."""
    return cohort['sample_id'].tolist()
