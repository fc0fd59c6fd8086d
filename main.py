from casewatch.main import main

if __name__ == "__main__":
    # Same entry point as ``casewatch`` / ``python -m casewatch.main``.
    raise SystemExit(main())
