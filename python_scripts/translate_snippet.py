import argparse
import json
import sys

from code_translator.services import TranslationError, find_language, list_languages, translate_code


def read_source(args: argparse.Namespace) -> str:
    if args.code is not None:
        return args.code
    if args.file == "-":
        return sys.stdin.read()
    with open(args.file, "r", encoding="utf-8") as f:
        return f.read()


def main() -> int:
    parser = argparse.ArgumentParser(description="Translate a code snippet with the configured completion service")
    src = parser.add_mutually_exclusive_group(required=True)
    src.add_argument("--code")
    src.add_argument("--file", help="path to a source file, '-' for stdin")
    parser.add_argument("--source", default="python")
    parser.add_argument("--target", default="javascript")
    parser.add_argument("--model", default=None)
    args = parser.parse_args()

    languages = list_languages()
    source = find_language(args.source, languages)
    target = find_language(args.target, languages)
    # unknown names are passed through verbatim
    source_name = source.name if source else args.source
    target_name = target.name if target else args.target

    result = {"source": source_name, "target": target_name}
    try:
        result["status"] = "success"
        result["output"] = translate_code(read_source(args), source_name, target_name, model=args.model)
        code = 0
    except TranslationError as e:
        result["status"] = "error"
        result["message"] = str(e)
        code = 1

    sys.stdout.write(json.dumps(result, ensure_ascii=False, indent=2))
    sys.stdout.write("\n")
    return code


if __name__ == "__main__":
    sys.exit(main())
