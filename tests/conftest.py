import numpy as np
import pandas as pd
import pytest

import config


@pytest.fixture
def cancer_types() -> pd.DataFrame:
    return pd.DataFrame({
        'sample_id': [
            'TCGA-A1-A0SB-01A-11R-A144-07',
            'TCGA-A2-A0CM-01A-31R-A034-07',
            'TCGA-05-4244-01A-01R-1107-07',
            'TCGA-XX-BRCA-01A',
            'TCGA-ZZ-0001-01A',
        ],
        'cancer_type': ['BRCA', 'BRCA', 'LUAD', 'NOTBRCA', None],
    })


@pytest.fixture
def clinical() -> pd.DataFrame:
    """Wide clinical table: variables as rows, sample barcodes as columns."""
    samples = {
        'TCGA-AA-0001-01A': ('Negative', 'Negative', 'Negative'),   # TNBC
        'TCGA-AA-0002-01A': ('Positive', 'Positive', 'Negative'),   # HER2+
        'TCGA-AA-0003-01A': ('Positive', 'Negative', 'Negative'),   # Other
        'TCGA-AA-0004-01A': ('Negative', 'Equivocal', 'Negative'),  # dropped
        'TCGA-AA-0005-01A': (' negative', 'NEGATIVE ', 'negative'), # TNBC
        'TCGA-AA-0006-01A': ('Negative', 'Positive', 'Positive'),   # HER2+
        'TCGA-AA-0007-01A': ('[Not Evaluated]', 'Positive', 'Positive'),  # dropped
    }
    rows = {
        'er_status_by_ihc': {s: v[0] for s, v in samples.items()},
        'her2_status_by_ihc': {s: v[1] for s, v in samples.items()},
        'pr_status_by_ihc': {s: v[2] for s, v in samples.items()},
        'gender': {s: 'FEMALE' for s in samples},
    }
    return pd.DataFrame(rows).T


@pytest.fixture
def analysis_table() -> pd.DataFrame:
    """Joined, log-transformed table with 12 patients per subtype."""
    rng = np.random.default_rng(0)
    n = 12
    rows = []
    for subtype, shift in [(config.HER2_POSITIVE, 0.0), (config.TNBC, 3.0)]:
        target = rng.normal(2 + shift, 0.5, n)
        for i in range(n):
            row = {
                'ER': config.NEGATIVE,
                'HER2': config.POSITIVE if subtype == config.HER2_POSITIVE else config.NEGATIVE,
                'PR': config.NEGATIVE,
                'TNBC': subtype == config.TNBC,
                'Status': subtype,
                config.TARGET_GENE: target[i],
            }
            for j, gene in enumerate(config.GENE_PANEL[1:]):
                # first correlated genes follow the target, later ones are noise
                if j < 3:
                    row[gene] = target[i] * (j + 1) + rng.normal(0, 0.05)
                else:
                    row[gene] = rng.normal(5, 1)
            rows.append(row)
    index = [f'TCGA-BB-{i:04d}' for i in range(len(rows))]
    return pd.DataFrame(rows, index=index)
