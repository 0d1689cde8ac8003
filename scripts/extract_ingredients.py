import argparse
import logging
import pathlib
import sys

from dotenv import find_dotenv, load_dotenv

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from bitelist.app.config import Settings
from bitelist.services.cancellation import CancellationToken
from bitelist.services.errors import ExtractionCancelledError, QuotaExceededError, UpstreamUnavailableError
from bitelist.services.ingest import build_extractor


def run_extraction(extractor, url: str, description: str | None, deadline: float | None) -> int:
    print("\n===", url)
    try:
        result = extractor.extract(url, description, cancel_token=CancellationToken(deadline))
    except ExtractionCancelledError as error:
        print("cancelled:", error)
        return 2
    except UpstreamUnavailableError as error:
        print("unavailable:", error)
        return 1

    print("source:", result.source.value)
    print("used_model:", result.used_model)
    print("ingredients:", len(result.ingredients))
    for ingredient in result.ingredients:
        print(" -", ingredient)
    return 0


def run_recipe_text(extractor, path: str) -> int:
    if extractor.model_client is None:
        print("OPENAI_API_KEY is not configured")
        return 1

    text = pathlib.Path(path).read_text(encoding="utf-8")
    try:
        ingredients = extractor.model_client.extract_from_recipe_text(text)
    except (QuotaExceededError, UpstreamUnavailableError) as error:
        print("unavailable:", error)
        return 1

    for ingredient in ingredients:
        print(" -", ingredient)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Extract ingredients from cooking video URLs")
    parser.add_argument("url", nargs="*")
    parser.add_argument("--description", default=None, help="Manual description of the video")
    parser.add_argument("--from-text", dest="recipe_file", default=None, help="Recipe text file to parse instead")
    parser.add_argument("--deadline", type=float, default=None, help="Seconds before giving up")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    if not args.url and not args.recipe_file:
        parser.error("pass at least one URL or --from-text FILE")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    env_path = find_dotenv(usecwd=True)
    if env_path:
        print(f".env found at: {env_path}")
        load_dotenv(dotenv_path=env_path)

    extractor = build_extractor(Settings(_env_file=None))

    if args.recipe_file:
        sys.exit(run_recipe_text(extractor, args.recipe_file))

    exit_code = 0
    for url in args.url:
        exit_code = max(exit_code, run_extraction(extractor, url, args.description, args.deadline))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
