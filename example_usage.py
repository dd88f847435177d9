import sys
from tra.analyze import analyze_report

if __name__ == "__main__":
    print("TRA Example Usage\n")

    report_dir = sys.argv[1] if len(sys.argv) > 1 else "allure-report/data"

    print(f"Analyzing {report_dir}...")
    try:
        result = analyze_report(
            report_dir=report_dir,
            config_path="tra.yml",
            output_dir="tra-out",
        )
        print(f"   Tests: {result.summary.total_tests}")
        print(f"   Flaky: {len(result.flakiness.flaky_tests)}")
        print(f"   Failure clusters: {result.failure_clusters.total_clusters}")
        print("   Check tra-out/analytics.json and tra-out/summary.md for details")
    except Exception as e:
        print(f"   Error: {e}")
        sys.exit(1)
