"""
Download TCGA cancer-type and clinical tables from GEO (GSE62944) and load
the locally supplied expression table.

Data sources:
- Cancer-type sample list: sample barcode -> TCGA cancer-type code
- Clinical variables: one row per variable, one column per sample
- Expression (local file): TPM values, one row per gene, one column per sample
"""

import os
import gzip
from typing import Tuple

import requests
import pandas as pd

import config
from logger import get_logger

log = get_logger(__name__)


def geo_params(filename: str, accession: str = config.GEO_ACCESSION) -> dict:
    """Query parameters that address one supplementary file of a GEO series."""
    return {'acc': accession, 'format': 'file', 'file': filename}


def download_file(
    filename: str,
    data_dir: str,
    accession: str = config.GEO_ACCESSION,
    refresh: bool = False
) -> str:
    """
    Download a GEO supplementary file into data_dir.

    An existing copy is reused unless refresh is set.

    Returns:
        Path of the local file
    """
    os.makedirs(data_dir, exist_ok=True)
    path = os.path.join(data_dir, filename)

    if os.path.exists(path) and not refresh:
        log.info("Using cached %s", path)
        return path

    log.info("Downloading %s from %s...", filename, accession)
    response = requests.get(
        config.GEO_DOWNLOAD_URL,
        params=geo_params(filename, accession),
        timeout=config.REQUEST_TIMEOUT
    )
    response.raise_for_status()

    with open(path, 'wb') as f:
        f.write(response.content)

    log.info("  Saved %d bytes to %s", len(response.content), path)
    return path


def read_tsv(path: str, **kwargs) -> pd.DataFrame:
    """Read a tab-separated file, decompressing .gz files."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input table not found: {path}")

    if path.endswith('.gz'):
        with gzip.open(path, 'rt') as f:
            return pd.read_csv(f, sep='\t', **kwargs)
    return pd.read_csv(path, sep='\t', **kwargs)


def load_cancer_types(path: str) -> pd.DataFrame:
    """Load the (sample_id, cancer_type) list. The file has no header."""
    df = read_tsv(path, header=None, names=['sample_id', 'cancer_type'], dtype=str)
    log.info("Loaded cancer types for %d samples", len(df))
    return df


def load_clinical(path: str) -> pd.DataFrame:
    """Load the wide clinical table (variables x samples)."""
    df = read_tsv(path, index_col=0, dtype=str)
    log.info("Loaded clinical table: %d variables, %d samples", df.shape[0], df.shape[1])
    return df


def load_expression(path: str, samples_as_rows: bool = False) -> pd.DataFrame:
    """
    Load the expression table and return it with samples as rows.

    Args:
        path: Tab-separated expression file, optionally gzipped
        samples_as_rows: Set when the file already has one row per sample

    Returns:
        DataFrame indexed by sample barcode with one column per gene
    """
    df = read_tsv(path, index_col=0)
    if not samples_as_rows:
        df = df.T

    df.index = df.index.astype(str)
    df.index.name = 'sample_id'
    log.info("Loaded expression: %d samples, %d genes", df.shape[0], df.shape[1])
    return df


def fetch_datasets(data_dir: str, refresh: bool = False) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Download (or reuse) and load the cancer-type list and clinical table."""
    cancer_type_path = download_file(config.CANCER_TYPE_FILE, data_dir, refresh=refresh)
    clinical_path = download_file(config.CLINICAL_FILE, data_dir, refresh=refresh)

    return load_cancer_types(cancer_type_path), load_clinical(clinical_path)
