"""
run_simulation.py
=================
Run the variable-selection simulation study and save its outputs.

Writes into the output directory:
- results.csv              one row per (SNR, Method, Replication)
- summary.csv              per (SNR, Method) means and standard deviations
- config.json              configuration used
- simulation_results.png   four-panel figure (unless --no-plot)

Example
-------
    python scripts/run_simulation.py --beta-type block --sparsity 5 --replications 50 -v
"""
import argparse
import json
import sys
from pathlib import Path

import matplotlib
matplotlib.use('Agg')

# Add parent to path for package import
sys.path.insert(0, str(Path(__file__).parent.parent))
import sparse_recovery as sr
from sparse_recovery.plotting import plot_simulation_results


BETA_TITLES = {
    'spaced': 'Equally spaced true coefficients',
    'block': 'Leading block of true coefficients',
    'weak': 'Weak sparsity',
}


def parse_args(argv=None):
    defaults = sr.StudyConfig()
    parser = argparse.ArgumentParser(description='Run variable selection simulation study')
    parser.add_argument('--n', type=int, default=defaults.n, help='Number of observations')
    parser.add_argument('--p', type=int, default=defaults.p, help='Number of covariates')
    parser.add_argument('--sparsity', type=int, default=defaults.sparsity,
                        help='Number of strong true coefficients')
    parser.add_argument('--rho', type=float, default=defaults.rho, help='Covariance decay')
    parser.add_argument('--beta-type', choices=sorted(sr.BETA_GENERATORS),
                        default=defaults.beta_type, help='Coefficient pattern')
    parser.add_argument('--decay-value', type=float, default=None,
                        help='Geometric decay base for --beta-type weak')
    parser.add_argument('--replications', type=int, default=defaults.n_replications)
    parser.add_argument('--methods', nargs='+', default=defaults.methods,
                        choices=list(sr.METHODS))
    parser.add_argument('--seed', type=int, default=defaults.base_seed)
    parser.add_argument('--cv-folds', type=int, default=defaults.cv_folds)
    parser.add_argument('--n-jobs', type=int, default=defaults.n_jobs,
                        help='Parallel jobs for forest growing')
    parser.add_argument('--output-dir', type=Path,
                        default=Path(__file__).parent / 'output')
    parser.add_argument('--no-plot', action='store_true', help='Skip the figure')
    parser.add_argument('-v', '--verbose', action='count', default=0)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    config = sr.StudyConfig(
        n=args.n,
        p=args.p,
        rho=args.rho,
        sparsity=args.sparsity,
        beta_type=args.beta_type,
        decay_value=args.decay_value,
        n_replications=args.replications,
        methods=args.methods,
        base_seed=args.seed,
        cv_folds=args.cv_folds,
        n_jobs=args.n_jobs,
        verbose=args.verbose,
    )

    results, beta = sr.run_study(config)
    analysis = sr.analyze_results(results, beta)
    sr.print_summary(analysis)

    output_dir = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    results.to_csv(output_dir / 'results.csv', index=False)
    analysis['summary'].to_csv(output_dir / 'summary.csv', index=False)
    with open(output_dir / 'config.json', 'w') as f:
        json.dump(config.to_dict(), f, indent=2, default=str)

    if not args.no_plot:
        plot_simulation_results(
            results, beta,
            title=BETA_TITLES[config.beta_type],
            save_path=output_dir / 'simulation_results.png',
        )

    print(f"Results saved to: {output_dir}")


if __name__ == "__main__":
    main()
