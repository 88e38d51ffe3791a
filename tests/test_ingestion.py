"""
tests/test_ingestion.py - Model Point Table Tests

Author: Life Simulator Project
License: MIT
"""

import pandas as pd
import pytest

from life_simulator.ingestion import (
    hash_file, load_model_points, policies_from_frame, policies_to_frame,
    write_model_points
)
from life_simulator.policy import Policy, PolicyGroup, PremiumType, Product, Sex


def model_point_frame():
    return pd.DataFrame({
        'policy_id': [1, 2, 3],
        'spec_id': ['A', 'B', 'A'],
        'age_at_entry': [47, 29, 51],
        'sex': ['M', 'F', 'M'],
        'policy_term': [10, 20, None],
        'policy_count': [86.0, 56.0, 12.5],
        'sum_assured': [622_000.0, 752_000.0, 799_000.0],
        'duration_mth': [1, 0, 24],
        'premium_pp': [100.0, 200.0, 0.0],
        'av_pp_init': [0.0, 0.0, 5_000.0],
        'accum_prem_init_pp': [0.0, 0.0, 0.0],
    })


class TestPoliciesFromFrame:
    """Schema mapping into policy groups."""

    def test_basic_mapping(self):
        groups = policies_from_frame(model_point_frame())
        assert len(groups) == 3

        first = groups[0]
        assert first.count == 86.0
        assert first.policy.sex == Sex.MALE
        assert first.policy.age == 47
        assert first.policy.term == 10
        assert first.policy.assured == 622_000.0
        assert first.policy.premium == 100.0
        assert first.policy.issued_at == -1, "issued_at must be minus the elapsed duration"

    def test_missing_term_is_whole_life(self):
        groups = policies_from_frame(model_point_frame())
        assert groups[2].policy.term is None
        assert groups[2].policy.expires_at is None
        assert groups[2].policy.account_value == 5_000.0

    def test_products_by_spec_id(self):
        products = {
            'A': Product(PremiumType.LEVEL, 0.05),
            'B': Product(PremiumType.SINGLE, 0.10),
        }
        groups = policies_from_frame(model_point_frame(), products)
        assert groups[0].policy.product == products['A']
        assert groups[1].policy.product.premium_type == PremiumType.SINGLE

    def test_unknown_spec_id_raises(self):
        with pytest.raises(ValueError, match="No product"):
            policies_from_frame(model_point_frame(), {'A': Product()})

    def test_aliases(self):
        df = model_point_frame().rename(columns={
            'age_at_entry': 'Age', 'sex': 'Gender', 'policy_count': 'Count',
            'sum_assured': 'Sum_Assured',
        })
        groups = policies_from_frame(df)
        assert groups[1].policy.age == 29
        assert groups[1].policy.sex == Sex.FEMALE
        assert groups[1].count == 56.0

    def test_missing_columns_raise(self):
        df = model_point_frame().drop(columns=['sum_assured', 'duration_mth'])
        with pytest.raises(ValueError, match="missing required columns"):
            policies_from_frame(df)

    def test_optional_columns_default(self):
        df = model_point_frame().drop(columns=['premium_pp', 'av_pp_init', 'policy_id'])
        groups = policies_from_frame(df)
        assert groups[0].policy.premium == 0.0
        assert groups[2].policy.account_value == 0.0


class TestPoliciesToFrame:
    """Policy groups back into the shared schema."""

    def test_schema_and_values(self):
        product = Product(PremiumType.LEVEL, 0.0)
        groups = [PolicyGroup(Policy(sex=Sex.FEMALE, age=33, issued_at=-5, term=15,
                                     assured=1000.0, premium=12.5, product=product), 4.0)]
        df = policies_to_frame(groups, {product: 'P1'})
        assert list(df.columns) == ['policy_id', 'spec_id', 'age_at_entry', 'sex',
                                    'policy_term', 'policy_count', 'sum_assured',
                                    'duration_mth', 'premium_pp', 'av_pp_init']
        row = df.iloc[0]
        assert row['policy_id'] == 1
        assert row['spec_id'] == 'P1'
        assert row['sex'] == 'F'
        assert row['duration_mth'] == 5

    def test_frame_reads_back(self):
        original = policies_from_frame(model_point_frame())
        again = policies_from_frame(policies_to_frame(original))
        assert [g.policy for g in again] == [g.policy for g in original]
        assert [g.count for g in again] == [g.count for g in original]


class TestFiles:
    """CSV and Excel model point files."""

    def test_csv(self, tmp_path):
        path = tmp_path / "points.csv"
        model_point_frame().to_csv(path, index=False)
        groups = load_model_points(path)
        assert len(groups) == 3
        assert groups[2].policy.term is None
        assert len(hash_file(path)) == 64

    def test_excel_round_trip(self, tmp_path):
        groups = policies_from_frame(model_point_frame())
        path = write_model_points(groups, tmp_path / "points.xlsx")
        loaded = load_model_points(path)
        assert [g.policy.assured for g in loaded] == [g.policy.assured for g in groups]
        assert [g.policy.issued_at for g in loaded] == [-1, 0, -24]

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "points.txt"
        path.write_text("nothing")
        with pytest.raises(ValueError, match="Unsupported file format"):
            load_model_points(path)
