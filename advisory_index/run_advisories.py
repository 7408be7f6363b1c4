#!/usr/bin/env python3
"""
Orchestrator for advisory document exports and scan filtering.

This module coordinates the two read-only consumers of the advisory store:
1. Export: load every advisories directory, check store quality, build the
   security database (secfixes feed), write a Markdown run report
2. Filter: load scan results and drop findings that advisories already
   account for

Usage:
    python run_advisories.py [--config path/to/config.yaml] export
    python run_advisories.py [--config path/to/config.yaml] filter FINDINGS [--set resolved]
"""
import sys
import json
import yaml
import logging
import argparse
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from advisory import BuildSecurityDatabaseOptions, build_security_database
from observability import ExportMetrics, QualityChecker, RunReporter
from scan import HttpClient, RetryConfig, filter_with_advisories, load_result, parse_advisories_set
from storage import DirectoryStore, Index

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class AdvisoryRunner:
    """
    Loads configuration and advisory indices, then runs export or filter.

    Design decisions:
    - Configuration is validated up front; bad config fails before any I/O
    - Indices are loaded strictly: a malformed document aborts the run
    - The security database is written only after every index contributed
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize runner with configuration.

        Args:
            config_path: Path to YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(self.config_path) as f:
            self.config = yaml.safe_load(f) or {}

        required_keys = ["advisories", "secdb"]
        for key in required_keys:
            if key not in self.config:
                raise ValueError(f"Missing required config key: {key}")

        dirs = self.config["advisories"].get("dirs")
        if not dirs or not isinstance(dirs, list):
            raise ValueError("Missing required config key: advisories.dirs (list of directories)")
        self.advisories_dirs: List[str] = dirs

        for key in ["url_prefix", "archs", "repo", "output"]:
            if key not in self.config["secdb"]:
                raise ValueError(f"Missing required secdb configuration: secdb.{key}")

        self.scan_config: Dict[str, Any] = self.config.get("scan") or {}
        parse_advisories_set(self.scan_config.get("advisories_set", "resolved"))

        logger.info(f"Runner initialized with config: {config_path}")

    def load_indices(self) -> Dict[str, Index]:
        """Load one Index per configured advisories directory."""
        return {d: Index.load(DirectoryStore(d)) for d in self.advisories_dirs}

    def export(self) -> ExportMetrics:
        """
        Build and write the security database.

        Returns:
            ExportMetrics with run statistics

        Raises:
            RuntimeError: If loading or export fails
        """
        run_id = f"run_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}"
        metrics = ExportMetrics(run_id=run_id, started_at=datetime.utcnow())
        secdb_config = self.config["secdb"]

        logger.info(f"=== Starting Export Run: {run_id} ===")

        try:
            logger.info("Stage 1: Loading advisory documents")
            indices = self.load_indices()
            metrics.indices_total = len(indices)

            logger.info("Stage 2: Running quality checks")
            quality_results = {}
            for source, index in indices.items():
                results = QualityChecker(index).run_all_checks()
                for r in results:
                    if not r.passed:
                        logger.warning(f"  {source}: {r.check_name}: {r.message}")
                quality_results[source] = results

            logger.info("Stage 3: Building security database")
            opts = BuildSecurityDatabaseOptions(
                advisory_doc_indices=list(indices.values()),
                url_prefix=secdb_config["url_prefix"],
                archs=list(secdb_config["archs"]),
                repo=secdb_config["repo"],
            )
            data = build_security_database(opts, metrics=metrics)

            output_path = Path(secdb_config["output"])
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(data)
            logger.info(f"  Wrote {metrics.packages_exported} packages to {output_path}")

            logger.info("Stage 4: Generating report")
            metrics.completed_at = datetime.utcnow()
            reporter = RunReporter()
            report = reporter.generate_report(metrics, quality_results)
            report_dir = Path((self.config.get("report") or {}).get("output_dir", "output"))
            report_path = reporter.save_report(report, report_dir)

            logger.info("=== Export Complete ===")
            logger.info(f"Packages: {metrics.packages_exported}")
            logger.info(f"Report: {report_path}")

        except Exception as e:
            metrics.record_error(str(e))
            logger.error(f"Export failed: {e}", exc_info=True)
            raise RuntimeError(f"Export failed: {e}") from e

        return metrics

    def filter(self, source: str, advisories_set: str = None) -> Dict[str, Any]:
        """
        Filter scan results from ``source`` with the configured advisories.

        Returns:
            Filtered result as a dict ready for JSON output
        """
        policy = parse_advisories_set(advisories_set or self.scan_config.get("advisories_set", "resolved"))
        client = HttpClient(RetryConfig(
            max_retries=self.scan_config.get("max_retries", 3),
            timeout_seconds=self.scan_config.get("timeout_seconds", 30.0),
        ))

        result = load_result(source, client)
        indices = list(self.load_indices().values())
        result.findings = filter_with_advisories(result.findings, indices, policy)
        return result.to_dict()


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Export and apply advisory data"
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("export", help="Build the security database")
    filter_parser = subparsers.add_parser("filter", help="Filter scan findings with advisories")
    filter_parser.add_argument("findings", help="Findings JSON: a path, '-' for stdin, or an https:// URL")
    filter_parser.add_argument("--set", dest="advisories_set", help="Advisories set used for filtering")
    args = parser.parse_args()

    try:
        runner = AdvisoryRunner(config_path=args.config)
        level = (runner.config.get("logging") or {}).get("level", "INFO")
        logging.getLogger().setLevel(level)

        if args.command == "export":
            metrics = runner.export()

            print("\n" + "=" * 60)
            print("Export Summary")
            print("=" * 60)
            print(f"Run ID: {metrics.run_id}")
            print(f"Packages: {metrics.packages_exported}")
            print(f"Errors: {metrics.errors}")
            print("\nStatus Distribution:")
            for state, count in sorted(metrics.status_counts.items()):
                print(f"  {state:20} {count:4}")
            print("=" * 60)
        else:
            print(json.dumps(runner.filter(args.findings, args.advisories_set), indent=2))

        sys.exit(0)

    except Exception as e:
        logger.error(f"Run failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
