# ============================================================================
# FILE: test/run_all_tests.py
# Master test runner: unit suites first, then PostgreSQL integration
# ============================================================================

import subprocess
import sys
import os

SUITES = [
    ("UNIT", ["test/utils/", "test/claim_worker/", "test/api_layer/"]),
    ("INTEGRATION", ["test/integration/"]),
]


def run_all_tests():
    """Run every suite; integration tests skip when TEST_DATABASE_URL is unreachable."""
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    failed = []

    for name, paths in SUITES:
        print("=" * 80)
        print(f"RUNNING {name} TESTS: {' '.join(paths)}")
        print("=" * 80)
        result = subprocess.run([
            sys.executable, "-m", "pytest",
            *paths,
            "-v",
            "--tb=short",
            "--durations=10",
        ], cwd=project_root)
        if result.returncode not in (0, 5):  # 5: nothing collected
            failed.append(name)

    print("=" * 80)
    print("ALL TESTS PASSED" if not failed else f"FAILED SUITES: {', '.join(failed)}")
    print("=" * 80)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(run_all_tests())
