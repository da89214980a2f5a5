import argparse
import sys

from spendlog.categorization.rules import Classifier
from spendlog.config import get_settings
from spendlog.core.exceptions import RuleConfigError


def serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "spendlog.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )
    return 0


def classify(args: argparse.Namespace) -> int:
    settings = get_settings()
    rules_path = args.rules or settings.rules_path
    try:
        classifier = Classifier.from_path(
            rules_path, case_sensitive=settings.category_match_case_sensitive
        )
    except RuleConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for description in args.descriptions:
        print(f"{classifier.classify(description).value}\t{description}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spendlog")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the webhook server")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.set_defaults(func=serve)

    classify_parser = subparsers.add_parser(
        "classify", help="Print the category each description would get"
    )
    classify_parser.add_argument("descriptions", nargs="+")
    classify_parser.add_argument("--rules", default=None, help="Rule file (YAML) to use")
    classify_parser.set_defaults(func=classify)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
