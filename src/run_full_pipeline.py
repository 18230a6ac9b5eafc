"""
Full Pipeline Runner

Executes the HER2+ vs TNBC expression analysis:
1. Download GSE62944 cancer-type and clinical tables
2. Select the BRCA cohort
3. Classify patients by receptor status
4. Join with the local expression table and log-transform the gene panel
5. Rank-sum test and Spearman correlations
6. Boxplot and scatterplots

Usage:
    python run_full_pipeline.py --expression TPM.txt [--refresh] [--skip-plots]
"""

import os
import sys
import logging
import argparse
from datetime import datetime

import config
import logger
from cohort import select_cohort, cohort_ids
from classify_subtypes import classify_patients
from download_data import fetch_datasets, load_expression
from expression_stats import rank_sum_test, correlate_with_target, panel_differential_expression
from plots import plot_subtype_boxplot, plot_all_correlations, boxplot_filename
from preprocess import prepare_analysis_table, split_by_subtype


def run_step(step_name, function, *args, **kwargs):
    """Run a pipeline step with timing. Failures are reported and re-raised."""
    print(f"\n{'='*70}")
    print(f"STEP: {step_name}")
    print(f"{'='*70}")

    start = datetime.now()
    try:
        result = function(*args, **kwargs)
    except Exception as e:
        print(f"\n✗ {step_name} failed: {e}")
        raise
    elapsed = datetime.now() - start
    print(f"\n✓ {step_name} completed in {elapsed}")
    return result


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Compare HER2+ and TNBC breast cancer gene expression (TCGA, GSE62944)'
    )
    parser.add_argument('--expression', required=True,
                        help='Tab-separated expression table (genes x samples, TPM)')
    parser.add_argument('--samples-as-rows', action='store_true',
                        help='Expression table has one row per sample')
    parser.add_argument('--data-dir', default=config.DATA_DIR,
                        help='Where downloaded GEO files are cached')
    parser.add_argument('--results-dir', default=config.RESULTS_DIR)
    parser.add_argument('--figures-dir', default=config.FIGURES_DIR)
    parser.add_argument('--refresh', action='store_true',
                        help='Download GEO files even if cached')
    parser.add_argument('--exact-cohort', action='store_true',
                        help=f'Require cancer type to equal {config.COHORT_MARKER} exactly')
    parser.add_argument('--skip-plots', action='store_true',
                        help='Write result tables only')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.verbose:
        logger.set_level(logging.DEBUG)

    print("="*70)
    print("BRCA SUBTYPE EXPRESSION ANALYSIS")
    print("="*70)
    print(f"Started at: {datetime.now()}")

    os.makedirs(args.results_dir, exist_ok=True)

    cancer_types, clinical = run_step(
        "Download GEO Tables", fetch_datasets, args.data_dir, refresh=args.refresh
    )
    expression = run_step(
        "Load Expression", load_expression, args.expression,
        samples_as_rows=args.samples_as_rows
    )

    cohort = run_step(
        "Select BRCA Cohort", select_cohort, cancer_types, exact=args.exact_cohort
    )
    patients = run_step(
        "Classify Receptor Subtypes", classify_patients, clinical, cohort_ids(cohort)
    )
    patients.to_csv(os.path.join(args.results_dir, 'classified_patients.csv'))

    table = run_step(
        "Join Expression and Log-Transform", prepare_analysis_table, patients, expression
    )
    groups = split_by_subtype(table)

    rank_sum = run_step("Rank-Sum Test", rank_sum_test, groups)
    correlations = run_step("Spearman Correlations", correlate_with_target, groups)
    panel = run_step("Panel Differential Expression", panel_differential_expression, groups)

    rank_sum.to_frame().to_csv(os.path.join(args.results_dir, 'rank_sum_test.csv'), index=False)
    correlations.to_csv(os.path.join(args.results_dir, 'spearman_correlations.csv'), index=False)
    panel.to_csv(os.path.join(args.results_dir, 'panel_differential_expression.csv'), index=False)

    if not args.skip_plots:
        os.makedirs(args.figures_dir, exist_ok=True)
        run_step(
            "Boxplot", plot_subtype_boxplot, table,
            os.path.join(args.figures_dir, boxplot_filename(config.TARGET_GENE)),
            pvalue=rank_sum.pvalue
        )
        run_step("Scatterplots", plot_all_correlations, groups, correlations, args.figures_dir)
    else:
        print("\n⏭ Skipping plots")

    print("\n" + "="*70)
    print("PIPELINE COMPLETE")
    print("="*70)
    print(f"Finished at: {datetime.now()}")

    print(f"\n{config.TARGET_GENE} {rank_sum.group_a} vs {rank_sum.group_b}: p = {rank_sum.pvalue:.3g}")
    print("\nSpearman correlations:")
    print(correlations.to_string(index=False))

    print(f"\nResults saved to: {args.results_dir}")
    if not args.skip_plots:
        print(f"Figures saved to: {args.figures_dir}")

    return rank_sum, correlations


if __name__ == '__main__':
    main(sys.argv[1:])
