import sys
import json
import logging
from datetime import timezone
import click
from tra import __version__
from tra.analyze import analyze_report, build_result
from tra.config import load_config
from tra.explain import explain_test
from tra.service import ResultsService
from tra.upload import publish_result

HEALTH_EXIT_CODES = {
    "healthy": 0,
    "warning": 10,
    "critical": 20,
}


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose):
    """Test Report Analytics - flakiness, retries and failure clusters from test reports"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("report_dir")
@click.option("--config", "-c", default="tra.yml", help="Config file path")
@click.option("--output-dir", "-o", default="tra-out", help="Output directory for analytics files")
@click.option("--junit", multiple=True, help="Additional JUnit XML report")
@click.option("--since", type=click.DateTime(), help="Only include tests started at or after this time (UTC)")
@click.option("--until", type=click.DateTime(), help="Only include tests started at or before this time (UTC)")
def analyze(report_dir, config, output_dir, junit, since, until):
    """Analyze a report directory and write analytics.json and summary.md"""
    try:
        result = analyze_report(
            report_dir=report_dir,
            config_path=config,
            output_dir=output_dir,
            junit_paths=junit,
            since=_as_utc(since),
            until=_as_utc(until),
        )
        summary = result.summary
        click.echo(
            f"Analyzed {summary.total_tests} tests: {summary.passed_tests} passed, "
            f"{summary.failed_tests} failed, {summary.broken_tests} broken, {summary.skipped_tests} skipped"
        )
        click.echo(f"Results written to {output_dir}")
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("test_name")
@click.argument("report_dir")
@click.option("--config", "-c", default="tra.yml", help="Config file path")
@click.option("--junit", multiple=True, help="Additional JUnit XML report")
def explain(test_name, report_dir, config, junit):
    """Explain the executions, flakiness and failures of one test"""
    try:
        found = explain_test(test_name, report_dir, config_path=config, junit_paths=junit)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if not found:
        sys.exit(1)


@main.command()
@click.argument("report_dir")
@click.option("--config", "-c", default="tra.yml", help="Config file path")
def health(report_dir, config):
    """Report healthy, warning or critical status for a report directory"""
    try:
        cfg = load_config(config)
        service = ResultsService(build_result(report_dir, cfg))
        status = service.get_health_status(cfg).data
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(status, indent=2))
    sys.exit(HEALTH_EXIT_CODES.get(status["status"], 1))


@main.command()
@click.argument("report_dir")
@click.option("--config", "-c", default="tra.yml", help="Config file path")
@click.option("--api-url", help="Analytics API URL")
@click.option("--token", help="API token")
@click.option("--include-tests", is_flag=True, help="Include every test execution in the payload")
def publish(report_dir, config, api_url, token, include_tests):
    """Publish analytics for a report directory to an HTTP endpoint"""
    try:
        cfg = load_config(config)
        service = ResultsService(build_result(report_dir, cfg))
        publish_result(service.build_webhook_payload(include_tests=include_tests), api_url=api_url, token=token)
        click.echo("Analytics published successfully")
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _as_utc(value):
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


if __name__ == "__main__":
    main()
