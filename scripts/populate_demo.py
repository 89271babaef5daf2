#!/usr/bin/env python3
"""Populate a data directory with synthetic customers and activity.

Usage:
    python scripts/populate_demo.py --data-dir local/demo
    python scripts/populate_demo.py --accounts 50 --operations 20 --seed 7
"""

import argparse
import json
from pathlib import Path

from bvdu_bank import Bank, BankConfig, setup_logging
from bvdu_bank.scenarios import DemoPopulationScenario


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--data-dir", type=Path, default=None, help="Overrides BVDU_DATA_DIR")
    parser.add_argument("--accounts", type=int, default=10)
    parser.add_argument("--operations", type=int, default=5, help="Operations per account")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-format", choices=["standard", "json"], default="standard")
    args = parser.parse_args()

    config = BankConfig.from_env()
    if args.data_dir is not None:
        config.storage.data_dir = args.data_dir
    setup_logging(config.log_level, args.log_format, config.log_file)

    with Bank(config) as bank:
        scenario = DemoPopulationScenario(
            bank,
            num_accounts=args.accounts,
            operations_per_account=args.operations,
            seed=args.seed,
        )
        summary = scenario.run()

    print(json.dumps(summary, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
