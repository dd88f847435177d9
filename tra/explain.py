from typing import Sequence
import click
from tra.config import load_config
from tra.analyze import load_tests
from tra.aggregate import aggregate_test_data
from tra.fingerprint import classify_error, match_category, build_rules
from tra.filters import format_duration


def explain_test(test_name: str, report_dir: str, config_path: str = "tra.yml", junit_paths: Sequence[str] = ()) -> bool:
    config = load_config(config_path)
    bundle, tests = load_tests(report_dir, config, junit_paths)
    result = aggregate_test_data(tests, config=config)

    include_parameters = config.include_parameters()
    executions = [tr for tr in result.tests if tr.identity_key(include_parameters) == test_name]
    if not executions:
        click.echo(f"Test {test_name} not found in {report_dir}")
        return False

    categories = bundle.categories[0] if bundle.categories else None
    rules = build_rules(config.get_signature_rules())

    click.echo(f"Explanation for test: {test_name}\n")
    click.echo(f"Executions: {len(executions)}")

    for tr in executions:
        click.echo(f"- {tr.status} in {format_duration(tr.duration)} (retries: {tr.retry_count})")
        if tr.status in ("failed", "broken"):
            click.echo(f"  Signature: {classify_error(tr.message, rules)}")
            described = match_category(tr.error_text, tr.status, categories)
            if described:
                click.echo(f"  {described[:500]}")

    for ft in result.flakiness.flaky_tests:
        if ft.test_name == test_name:
            click.echo(f"\nFlakiness Score: {ft.flakiness_score:.2f}")
            click.echo(f"Passed: {ft.pass_count}, Failed: {ft.fail_count}")
            break
    else:
        click.echo("\nNot flaky in this report")

    return True
