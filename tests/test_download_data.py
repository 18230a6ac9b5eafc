"""
Download and loading tests without hitting the network: requests.get is
patched to return canned file contents.
"""

import gzip
from unittest.mock import Mock, patch

import pytest
import requests

import config
from download_data import (
    download_file,
    fetch_datasets,
    geo_params,
    load_cancer_types,
    load_clinical,
    load_expression,
)

CANCER_TYPES = b"TCGA-A1-A0SB-01A\tBRCA\nTCGA-05-4244-01A\tLUAD\n"
CLINICAL = (
    b"variable\tTCGA-A1-A0SB-01A\tTCGA-05-4244-01A\n"
    b"er_status_by_ihc\tNegative\t[Not Available]\n"
    b"her2_status_by_ihc\tNegative\t[Not Available]\n"
    b"pr_status_by_ihc\tNegative\t[Not Available]\n"
)


def test_geo_params():
    assert geo_params('x.txt.gz') == {'acc': 'GSE62944', 'format': 'file', 'file': 'x.txt.gz'}


def test_download_file_requests_geo(tmp_path):
    response = Mock(status_code=200, content=gzip.compress(CANCER_TYPES))
    with patch("download_data.requests.get", return_value=response) as get:
        path = download_file('types.txt.gz', str(tmp_path))

    get.assert_called_once()
    assert get.call_args.args[0] == config.GEO_DOWNLOAD_URL
    assert get.call_args.kwargs['params']['file'] == 'types.txt.gz'
    assert (tmp_path / 'types.txt.gz').read_bytes() == response.content
    assert path == str(tmp_path / 'types.txt.gz')


def test_download_file_reuses_cache(tmp_path):
    (tmp_path / 'types.txt').write_bytes(CANCER_TYPES)
    with patch("download_data.requests.get") as get:
        download_file('types.txt', str(tmp_path))
    get.assert_not_called()


def test_download_file_refresh(tmp_path):
    (tmp_path / 'types.txt').write_bytes(b"old")
    response = Mock(status_code=200, content=CANCER_TYPES)
    with patch("download_data.requests.get", return_value=response):
        download_file('types.txt', str(tmp_path), refresh=True)
    assert (tmp_path / 'types.txt').read_bytes() == CANCER_TYPES


def test_download_file_http_error(tmp_path):
    response = Mock(status_code=404)
    response.raise_for_status.side_effect = requests.HTTPError("404")
    with patch("download_data.requests.get", return_value=response):
        with pytest.raises(requests.HTTPError):
            download_file('missing.txt', str(tmp_path))
    assert not (tmp_path / 'missing.txt').exists()


def test_fetch_datasets(tmp_path):
    def fake_get(url, params=None, **kwargs):
        if params['file'] == config.CANCER_TYPE_FILE:
            return Mock(status_code=200, content=gzip.compress(CANCER_TYPES))
        return Mock(status_code=200, content=gzip.compress(CLINICAL))

    with patch("download_data.requests.get", side_effect=fake_get):
        cancer_types, clinical = fetch_datasets(str(tmp_path))

    assert cancer_types['cancer_type'].tolist() == ['BRCA', 'LUAD']
    assert clinical.loc['er_status_by_ihc', 'TCGA-A1-A0SB-01A'] == 'Negative'


def test_load_cancer_types_plain(tmp_path):
    path = tmp_path / 'types.txt'
    path.write_bytes(CANCER_TYPES)
    df = load_cancer_types(str(path))
    assert list(df.columns) == ['sample_id', 'cancer_type']
    assert df['sample_id'].tolist() == ['TCGA-A1-A0SB-01A', 'TCGA-05-4244-01A']


def test_load_clinical(tmp_path):
    path = tmp_path / 'clinical.txt'
    path.write_bytes(CLINICAL)
    df = load_clinical(str(path))
    assert list(df.index) == ['er_status_by_ihc', 'her2_status_by_ihc', 'pr_status_by_ihc']
    assert df.shape == (3, 2)


def test_load_expression_transposes(tmp_path):
    path = tmp_path / 'tpm.txt'
    path.write_text("gene\tTCGA-A1-A0SB-01A\tTCGA-A2-A0CM-01A\nCD274\t1.5\t0\nPDCD1\t2\t3\n")
    df = load_expression(str(path))
    assert list(df.index) == ['TCGA-A1-A0SB-01A', 'TCGA-A2-A0CM-01A']
    assert list(df.columns) == ['CD274', 'PDCD1']
    assert df.loc['TCGA-A1-A0SB-01A', 'CD274'] == 1.5


def test_load_expression_samples_as_rows(tmp_path):
    path = tmp_path / 'tpm.txt'
    path.write_text("sample\tCD274\tPDCD1\nTCGA-A1-A0SB-01A\t1.5\t2\n")
    df = load_expression(str(path), samples_as_rows=True)
    assert df.loc['TCGA-A1-A0SB-01A', 'PDCD1'] == 2


def test_load_expression_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_expression(str(tmp_path / 'nope.txt'))
