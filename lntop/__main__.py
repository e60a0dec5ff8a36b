if __name__ == "__main__":
    try:
        from lntop.cli import main
    except ModuleNotFoundError as e:
        if "textual" in str(e) or "requests" in str(e):
            import sys
            print("Missing dependency. Run from project root: pip install -e .", file=sys.stderr)
            sys.exit(1)
        raise
    raise SystemExit(main())
