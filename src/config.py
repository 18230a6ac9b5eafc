"""
Shared constants for the BRCA subtype expression pipeline.

Data source: GEO series GSE62944 (TCGA RNA-seq reprocessed with a common
pipeline, plus the matching clinical variables).
"""

import os

# GEO download endpoint; files are addressed by accession and file name
GEO_DOWNLOAD_URL = 'https://www.ncbi.nlm.nih.gov/geo/download/'
GEO_ACCESSION = 'GSE62944'
CANCER_TYPE_FILE = 'GSE62944_06_01_15_TCGA_24_CancerType_Samples.txt.gz'
CLINICAL_FILE = 'GSE62944_06_01_15_TCGA_24_548_Clinical_Variables_9264_Samples.txt.gz'
REQUEST_TIMEOUT = 300

COHORT_MARKER = 'BRCA'

# Clinical variable -> short column name
RECEPTOR_FIELDS = {
    'er_status_by_ihc': 'ER',
    'her2_status_by_ihc': 'HER2',
    'pr_status_by_ihc': 'PR',
}

# TCGA patient barcode, e.g. TCGA-A1-A0SB
BARCODE_LENGTH = 12

POSITIVE = 'Positive'
NEGATIVE = 'Negative'

TNBC = 'TNBC'
HER2_POSITIVE = 'HER2+'
OTHER = 'Other'
SUBTYPES = [HER2_POSITIVE, TNBC]

# First gene is the one tested across subtypes and correlated with the rest
TARGET_GENE = 'CD274'
GENE_PANEL = [TARGET_GENE, 'PDCD1', 'CTLA4', 'LAG3', 'HAVCR2', 'TIGIT', 'IDO1']

PROJECT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
DATA_DIR = os.path.join(PROJECT_DIR, 'data')
RESULTS_DIR = os.path.join(PROJECT_DIR, 'results')
FIGURES_DIR = os.path.join(PROJECT_DIR, 'figures')
