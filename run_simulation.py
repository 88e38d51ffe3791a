#!/usr/bin/env python3
"""
run_simulation.py - Cashflow Projection Runner

Runs a complete projection from start to finish:
1. Load model points
2. Build the product model (defaults or JSON configuration)
3. Estimate premiums (term life, optional)
4. Project monthly cashflows
5. Write per-month cashflows to CSV or Excel

Usage:
    python run_simulation.py --model-points model_points.csv --estimate-premiums

    python run_simulation.py \\
        --model-points savings_points.xlsx \\
        --product universal_life \\
        --config assumptions.json \\
        --months 240 \\
        --output cashflows.xlsx

Author: Life Simulator Project
"""

import argparse
import sys
import logging
from pathlib import Path
from typing import Any, Dict, Optional

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_projection(
    model_points_path: str,
    product: str = "term_life",
    config_path: Optional[str] = None,
    months: Optional[int] = None,
    estimate: bool = False,
    output_path: Optional[str] = None,
    seed: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Run a cashflow projection.

    Args:
        model_points_path: Model point table (CSV or Excel)
        product: 'term_life' or 'universal_life' (ignored with a config file)
        config_path: JSON model configuration
        months: Projection length; until the last expiry if omitted
        estimate: Replace premiums with estimated premiums (term life)
        output_path: Per-month cashflow output (CSV or Excel)
        seed: Seed for the investment path (universal life defaults)

    Returns:
        Dict with the total cashflow and the per-month DataFrame
    """
    from life_simulator import (
        ModelFactory,
        TermLifeModel,
        cashflows_to_frame,
        estimate_premiums,
        load_model_points,
        project_cashflows,
        projection_length,
        total_cashflow,
    )

    print("=" * 70)
    print("CASHFLOW PROJECTION")
    print("=" * 70)
    print(f"Model points: {model_points_path}")
    print(f"Product:      {product if config_path is None else config_path}")
    print()

    # =========================================================================
    # STEP 1: Load model points
    # =========================================================================
    print("Step 1: Loading model points...")
    policies = load_model_points(model_points_path)
    print(f"  Groups:   {len(policies)}")
    print(f"  Policies: {sum(g.count for g in policies):,.0f}")
    print()

    # =========================================================================
    # STEP 2: Build model
    # =========================================================================
    print("Step 2: Building model...")
    if config_path:
        model = ModelFactory.create_from_file(config_path)
    else:
        config = {'product_type': product}
        if seed is not None:
            config['investment_seed'] = seed
        model = ModelFactory.create_from_dict(config)
    print(f"  Model: {model.name}")
    print()

    n_months = months if months is not None else projection_length(policies)
    if n_months <= 0:
        raise ValueError("Projection length is zero; pass --months for whole-life portfolios")

    # =========================================================================
    # STEP 3: Premiums
    # =========================================================================
    if estimate:
        if not isinstance(model, TermLifeModel):
            raise ValueError("Premium estimation is only available for term life models")
        print("Step 3: Estimating premiums...")
        policies = estimate_premiums(model, policies, n_months)
        for group in policies[:5]:
            print(f"  age {group.policy.age:>3}  assured {group.policy.assured:>12,.0f}  "
                  f"premium {group.policy.premium:>10,.2f}")
        print()

    # =========================================================================
    # STEP 4: Project
    # =========================================================================
    print(f"Step 4: Projecting {n_months} months...")

    def report(step: int, total: int) -> None:
        if step % 12 == 0 or step == total:
            logger.info(f"Projected {step}/{total} months")

    cashflows = project_cashflows(model, policies, n_months, progress_callback=report)
    total = total_cashflow(cashflows)
    df = cashflows_to_frame(cashflows)

    print(f"  Premiums:     {total.premiums:>16,.2f}")
    print(f"  Investments:  {total.investments:>16,.2f}")
    print(f"  Claims:       {total.claims:>16,.2f}")
    print(f"  Expenses:     {total.expenses:>16,.2f}")
    print(f"  Commissions:  {total.commissions:>16,.2f}")
    print(f"  AV changes:   {total.account_value_changes:>16,.2f}")
    print(f"  Net:          {total.net:>16,.2f}")
    print(f"  PV of net:    {total.discounted:>16,.2f}")
    print()

    # =========================================================================
    # STEP 5: Output
    # =========================================================================
    if output_path:
        print("Step 5: Writing output...")
        path = Path(output_path)
        if path.suffix.lower() == '.xlsx':
            df.to_excel(path)
        elif path.suffix.lower() == '.csv':
            df.to_csv(path)
        else:
            raise ValueError(f"Unsupported output format: {path.suffix}")
        print(f"  Written: {path}")
        print()

    return {'total': total, 'cashflows': df}


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Project insurance portfolio cashflows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--model-points', '-m', required=True,
                        help='Model point table (CSV or Excel)')
    parser.add_argument('--product', '-p', default='term_life',
                        choices=['term_life', 'universal_life'],
                        help='Product family (default: term_life)')
    parser.add_argument('--config', '-c', help='JSON model configuration')
    parser.add_argument('--months', '-n', type=int,
                        help='Projection length in months (default: until last expiry)')
    parser.add_argument('--estimate-premiums', action='store_true',
                        help='Estimate premiums before projecting (term life)')
    parser.add_argument('--output', '-o', help='Output file for monthly cashflows')
    parser.add_argument('--seed', type=int, help='Seed for the investment path')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log every simulated month')

    args = parser.parse_args()
    if args.verbose:
        logging.getLogger('life_simulator').setLevel(logging.DEBUG)

    try:
        run_projection(
            model_points_path=args.model_points,
            product=args.product,
            config_path=args.config,
            months=args.months,
            estimate=args.estimate_premiums,
            output_path=args.output,
            seed=args.seed,
        )
    except (ValueError, FileNotFoundError) as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
