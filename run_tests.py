#!/usr/bin/env python3
"""
Test runner script for profile-nickname-commons
Runs the commons package, Lambda function and integration suites
"""
import os
import sys
import subprocess
import argparse


COMMONS_TESTS = 'nickname_commons/tests'
INTEGRATION_TESTS = 'test_nickname_availability_integration.py'


def run_command(command, cwd=None):
    """Run a command and return the result"""
    print(f"Running: {command}")
    result = subprocess.run(
        command, shell=True, cwd=cwd, capture_output=True, text=True
    )
    print(result.stdout)
    if result.stderr:
        print(f"Error: {result.stderr}")
    return result.returncode == 0


def discover_test_files():
    """Discover all test files in the project"""
    test_files = []
    for root, dirs, files in os.walk('.'):
        dirs[:] = [d for d in dirs if not d.startswith('.')]
        for file in files:
            if file.startswith('test_') and file.endswith('.py'):
                test_files.append(os.path.join(root, file))
    return test_files


def discover_functions():
    """Lambda function directories carrying their own tests"""
    return sorted(
        item for item in os.listdir('.')
        if os.path.isdir(item) and os.path.exists(os.path.join(item, 'app.py'))
        and os.path.exists(os.path.join(item, 'tests'))
    )


def run_suite(name, target, coverage=False):
    """Run one pytest target"""
    if not os.path.exists(target):
        print(f"No tests found for {name}")
        return False

    cmd = f"python -m pytest {target} -v"
    if coverage:
        cmd += f" --cov=nickname_commons --cov-report=term-missing --cov-report=html:coverage_html/{name}"

    return run_command(cmd)


def run_all_tests(coverage=False, fail_under=80):
    """Run all tests in the project"""
    print("Running all tests for profile-nickname-commons")
    print("=" * 60)

    suites = {'nickname_commons': COMMONS_TESTS}
    for func in discover_functions():
        suites[func] = f"{func}/tests"
    suites['integration'] = INTEGRATION_TESTS

    print(f"Found suites: {list(suites)}")

    all_passed = True
    results = {}

    for name, target in suites.items():
        print(f"\nTesting {name}...")
        success = run_suite(name, target, coverage)
        results[name] = "PASSED" if success else "FAILED"
        if not success:
            all_passed = False

    if coverage:
        print("\nGenerating overall coverage report...")
        targets = ' '.join(suites.values())
        cmd = (f"python -m pytest {targets} --cov=nickname_commons --cov-report=html:coverage_html/overall "
               f"--cov-report=term-missing --cov-fail-under={fail_under}")
        if not run_command(cmd):
            all_passed = False

    print("\n" + "=" * 60)
    print("TEST SUMMARY")
    print("=" * 60)

    for name, result in results.items():
        print(f"{name:<20} {result}")

    if coverage:
        print("\nCoverage reports generated in coverage_html/")

    print("\nALL TESTS PASSED" if all_passed else "\nSOME TESTS FAILED")

    return all_passed


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Run tests for profile-nickname-commons")
    parser.add_argument("--function", "-f", help="Run tests for specific function only")
    parser.add_argument("--coverage", "-c", action="store_true", help="Generate coverage reports")
    parser.add_argument("--fail-under", type=int, default=80, help="Coverage threshold (default: 80%%)")
    parser.add_argument("--list", "-l", action="store_true", help="List all available test files")

    args = parser.parse_args()

    if args.list:
        print("Available test files:")
        for file in sorted(discover_test_files()):
            print(f"  {file}")
        return

    if args.function:
        success = run_suite(args.function, f"{args.function}/tests", args.coverage)
    else:
        success = run_all_tests(args.coverage, args.fail_under)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
