import os
import sys
import tempfile
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Keep test logs out of the working tree
os.environ.setdefault("SVMLAB_LOG_DIR", os.path.join(tempfile.gettempdir(), "svmlab-test-logs"))

from svmlab.components.data_ingestion import Dataset  # noqa: E402


def make_numeric_records(n_rows=100, seed=0):
    """3 numeric features, a yes/no target and a few missing cells."""
    rng = np.random.default_rng(seed)
    f1 = rng.normal(10.0, 2.0, n_rows)
    f2 = rng.normal(-5.0, 4.0, n_rows)
    f3 = rng.uniform(0.0, 100.0, n_rows)

    records = []
    for i in range(n_rows):
        records.append(
            {
                'f1': float(f1[i]),
                'f2': float(f2[i]),
                'f3': float(f3[i]),
                'label': 'yes' if i % 2 == 0 else 'no',
            }
        )
    records[3]['f1'] = None
    records[17]['f2'] = None
    records[42]['f3'] = ''
    return records


def make_separable_records(n_per_class=40, seed=1):
    """Two well separated blobs, numeric labels 0 / 1."""
    rng = np.random.default_rng(seed)
    negative = rng.normal(loc=(-4.0, -4.0), scale=0.5, size=(n_per_class, 2))
    positive = rng.normal(loc=(4.0, 4.0), scale=0.5, size=(n_per_class, 2))

    records = [{'x1': float(a), 'x2': float(b), 'target': 0} for a, b in negative]
    records += [{'x1': float(a), 'x2': float(b), 'target': 1} for a, b in positive]
    return records


@pytest.fixture
def numeric_dataset():
    return Dataset.from_records(make_numeric_records(), filename='numeric.csv', size=4096)


@pytest.fixture
def separable_dataset():
    return Dataset.from_records(make_separable_records(), filename='separable.csv', size=2048)


@pytest.fixture
def separable_split(separable_dataset):
    rows = separable_dataset.rows
    data = [{'x1': row['x1'], 'x2': row['x2']} for row in rows]
    labels = [row['target'] for row in rows]
    return data, labels


@pytest.fixture
def mixed_dataframe():
    return pd.DataFrame(
        {
            'age': [25, 32, 47, 51, None, 38, 29, 60],
            'income': [40000.5, 52000.0, 61000.25, None, 45000.0, 58000.0, 39000.0, 72000.0],
            'city': [' Paris', 'Lyon ', 'Paris', 'Nice', 'Lyon', 'Paris', 'Nice', 'Lyon'],
            'member': [True, False, True, True, False, False, True, False],
            'notes': [None] * 8,
        }
    )
