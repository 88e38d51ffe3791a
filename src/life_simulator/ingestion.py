"""
life_simulator/ingestion.py - Model Point Tables

Maps model point tables to PolicyGroup values and back.

SCHEMA (one row per policy group):
    policy_id, spec_id, age_at_entry, sex, policy_term, policy_count,
    sum_assured, duration_mth, premium_pp, av_pp_init

Mapping:
- issued_at = -duration_mth (groups already in force have negative issue months)
- Empty policy_term means whole of life
- spec_id selects a Product from an optional mapping
- Unknown columns are ignored; known columns are matched through aliases

Files:
- CSV (.csv) and Excel (.xlsx, .xls) via pandas
- SHA-256 of the file is logged for reproducibility

Author: Life Simulator Project
License: MIT
"""

import hashlib
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union
import pandas as pd
import logging

from .policy import Policy, PolicyGroup, Product, Sex

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = [
    'policy_id', 'spec_id', 'age_at_entry', 'sex', 'policy_term',
    'policy_count', 'sum_assured', 'duration_mth', 'premium_pp', 'av_pp_init',
]

# Columns that may be absent, with their defaults
OPTIONAL_DEFAULTS = {
    'policy_id': None,
    'spec_id': None,
    'premium_pp': 0.0,
    'av_pp_init': 0.0,
}

COLUMN_ALIASES = {
    'point_id': 'policy_id', 'id': 'policy_id', 'policyid': 'policy_id',
    'spec': 'spec_id', 'specid': 'spec_id', 'product': 'spec_id',
    'age': 'age_at_entry', 'issue_age': 'age_at_entry', 'ageatentry': 'age_at_entry',
    'gender': 'sex',
    'term': 'policy_term', 'policyterm': 'policy_term',
    'count': 'policy_count', 'policycount': 'policy_count',
    'assured': 'sum_assured', 'sumassured': 'sum_assured',
    'duration': 'duration_mth', 'durationmth': 'duration_mth',
    'premium': 'premium_pp', 'premiumpp': 'premium_pp',
    'account_value': 'av_pp_init', 'avppinit': 'av_pp_init',
}


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename known aliases to the canonical schema column names."""
    rename_map = {}
    for col in df.columns:
        col_lower = str(col).strip().lower()
        if col_lower in REQUIRED_COLUMNS:
            rename_map[col] = col_lower
        elif col_lower in COLUMN_ALIASES:
            rename_map[col] = COLUMN_ALIASES[col_lower]
    if rename_map:
        df = df.rename(columns=rename_map)
    return df


def policies_from_frame(df: pd.DataFrame,
                        products: Optional[Mapping[object, Product]] = None) -> List[PolicyGroup]:
    """
    Convert a model point table to policy groups.

    Args:
        df: Model point table
        products: Mapping of spec_id to Product; Product() when omitted

    Returns:
        One PolicyGroup per row, in row order

    Raises:
        ValueError: If mandatory columns are missing or a spec_id has no product
    """
    df = normalize_columns(df)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns and c not in OPTIONAL_DEFAULTS]
    if missing:
        raise ValueError(f"Model point table missing required columns: {missing}")

    groups = []
    for _, row in df.iterrows():
        product = Product()
        if products is not None:
            spec_id = row.get('spec_id')
            if spec_id not in products:
                raise ValueError(f"No product defined for spec_id {spec_id!r}")
            product = products[spec_id]

        term = row['policy_term']
        policy = Policy(
            sex=Sex.from_code(row['sex']),
            age=int(row['age_at_entry']),
            issued_at=-int(row['duration_mth']),
            term=None if pd.isna(term) else int(term),
            assured=float(row['sum_assured']),
            premium=_float_or_default(row, 'premium_pp'),
            account_value=_float_or_default(row, 'av_pp_init'),
            product=product,
        )
        groups.append(PolicyGroup(policy, float(row['policy_count'])))

    logger.info(f"Built {len(groups)} policy groups ({sum(g.count for g in groups):,.0f} policies)")
    return groups


def _float_or_default(row: pd.Series, column: str) -> float:
    value = row.get(column, OPTIONAL_DEFAULTS[column])
    if value is None or pd.isna(value):
        return OPTIONAL_DEFAULTS[column]
    return float(value)


def policies_to_frame(groups: Iterable[PolicyGroup],
                      spec_ids: Optional[Mapping[Product, object]] = None) -> pd.DataFrame:
    """
    Convert policy groups to a model point table.

    Args:
        groups: Policy groups
        spec_ids: Mapping of Product to spec_id; spec_id is left empty when omitted

    Returns:
        DataFrame with the REQUIRED_COLUMNS schema, policy_id numbered from 1
    """
    rows = []
    for i, group in enumerate(groups, start=1):
        policy = group.policy
        rows.append({
            'policy_id': i,
            'spec_id': spec_ids.get(policy.product) if spec_ids else None,
            'age_at_entry': policy.age,
            'sex': policy.sex.value,
            'policy_term': policy.term,
            'policy_count': group.count,
            'sum_assured': policy.assured,
            'duration_mth': -policy.issued_at,
            'premium_pp': policy.premium,
            'av_pp_init': policy.account_value,
        })
    return pd.DataFrame(rows, columns=REQUIRED_COLUMNS)


def hash_file(filepath: Union[str, Path]) -> str:
    """SHA-256 of a file."""
    sha256 = hashlib.sha256()
    with open(filepath, 'rb') as f:
        for chunk in iter(lambda: f.read(8192), b''):
            sha256.update(chunk)
    return sha256.hexdigest()


def read_model_points(filepath: Union[str, Path],
                      sheet_name: Optional[str] = None) -> pd.DataFrame:
    """
    Read a model point file.

    Raises:
        ValueError: If the file extension is not supported
    """
    filepath = Path(filepath)
    file_hash = hash_file(filepath)
    logger.info(f"Loading file: {filepath.name} (SHA-256: {file_hash[:16]}...)")

    if filepath.suffix.lower() in ('.xlsx', '.xls'):
        df = pd.read_excel(filepath, sheet_name=sheet_name or 0)
    elif filepath.suffix.lower() == '.csv':
        df = pd.read_csv(filepath)
    else:
        raise ValueError(f"Unsupported file format: {filepath.suffix}")

    logger.info(f"Loaded {len(df)} rows, {len(df.columns)} columns")
    return df


def load_model_points(filepath: Union[str, Path],
                      products: Optional[Mapping[object, Product]] = None,
                      sheet_name: Optional[str] = None) -> List[PolicyGroup]:
    """Read a model point file and convert it to policy groups."""
    return policies_from_frame(read_model_points(filepath, sheet_name), products)


def write_model_points(groups: Iterable[PolicyGroup], filepath: Union[str, Path],
                       spec_ids: Optional[Dict[Product, object]] = None) -> Path:
    """
    Write policy groups to a CSV or Excel model point file.

    Raises:
        ValueError: If the file extension is not supported
    """
    filepath = Path(filepath)
    df = policies_to_frame(groups, spec_ids)
    if filepath.suffix.lower() == '.xlsx':
        df.to_excel(filepath, index=False)
    elif filepath.suffix.lower() == '.csv':
        df.to_csv(filepath, index=False)
    else:
        raise ValueError(f"Unsupported file format: {filepath.suffix}")
    logger.info(f"Wrote {len(df)} model points to {filepath.name}")
    return filepath
