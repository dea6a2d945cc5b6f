from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from application.payloads import formulation_to_response, parse_formulation_request
from config.constants import APP_NAME, APP_VERSION, DEFAULT_LOG_LEVEL, ENV_LOG_LEVEL
from config.container import Container
from domain.exceptions import FeedFormulatorError, ValidationError
from domain.models import FormulationRecord, FormulationRequest, IngredientProfile


def _configure_logging(level_name: Optional[str]) -> None:
    level_name = (level_name or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _read_request(path: str) -> Dict[str, Any]:
    try:
        text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")
        return json.loads(text)
    except (OSError, json.JSONDecodeError) as exc:
        raise ValidationError(f"Could not read formulation request {path}: {exc}") from exc


def _select_from_catalog(
    data: Dict[str, Any], catalog: List[IngredientProfile]
) -> tuple[IngredientProfile, ...]:
    """Ingredients named by ``ingredientIds`` in that order, else the whole catalog."""
    wanted = data.get("ingredientIds")
    if not wanted:
        return tuple(catalog)

    by_id = {ing.id: ing for ing in catalog}
    selected = []
    for ingredient_id in wanted:
        ingredient = by_id.get(str(ingredient_id))
        if ingredient is None:
            raise ValidationError(f"Ingredient not found in catalog: {ingredient_id}")
        selected.append(ingredient)
    return tuple(selected)


def _record_summary(record: FormulationRecord) -> Dict[str, Any]:
    result = record.result
    return {
        "id": record.id,
        "createdAt": record.created_at.isoformat(),
        "species": result.labels.species,
        "phase": result.labels.phase,
        "feedBatchWeight": float(result.batch_weight_kg),
        "totalCost": float(result.cost.total_cost),
    }


def _emit(payload: Any) -> None:
    json.dump(payload, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_calculate(container: Container, args: argparse.Namespace) -> int:
    data = _read_request(args.request)
    request: FormulationRequest = parse_formulation_request(data)

    if args.catalog:
        catalog = container.import_ingredients.execute(args.catalog)
        request = dataclasses.replace(request, ingredients=_select_from_catalog(data, catalog))

    result = container.calculate_formulation.execute(request)
    response = formulation_to_response(result)

    # Export first so a failed export leaves nothing stored
    if args.export:
        container.export_formulation.execute(result, args.export)

    if args.save:
        record = container.save_formulation.execute(result)
        response["id"] = record.id
        response["createdAt"] = record.created_at.isoformat()

    _emit(response)
    return 0


def cmd_list(container: Container, args: argparse.Namespace) -> int:
    _emit([_record_summary(record) for record in container.list_formulations.execute()])
    return 0


def cmd_show(container: Container, args: argparse.Namespace) -> int:
    record = container.load_formulation.execute(args.formulation_id)
    response = formulation_to_response(record.result)
    response["id"] = record.id
    response["createdAt"] = record.created_at.isoformat()
    _emit(response)
    return 0


def cmd_delete(container: Container, args: argparse.Namespace) -> int:
    container.delete_formulation.execute(args.formulation_id)
    _emit({"message": "Feed formulation deleted successfully", "id": args.formulation_id})
    return 0


def cmd_ingredients(container: Container, args: argparse.Namespace) -> int:
    ingredients = container.import_ingredients.execute(
        args.catalog, category=args.category, search=args.search
    )
    _emit(
        [
            {
                "id": ing.id,
                "name": ing.name,
                "category": ing.category.value,
                "crudeProtein": float(ing.crude_protein),
                "energy": float(ing.energy),
                "costPerKg": float(ing.cost_per_kg),
            }
            for ing in sorted(ingredients, key=lambda ing: ing.name.lower())
        ]
    )
    return 0


def cmd_categories(container: Container, args: argparse.Namespace) -> int:
    ingredients = container.import_ingredients.execute(args.catalog)
    _emit(container.ingredient_importer.categories(ingredients))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feed-formulator",
        description="Balance a feed mix against nutrient targets (Pearson's square).",
    )
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    parser.add_argument(
        "--saves-dir",
        dest="saves_dir",
        default=None,
        help="Directory for stored formulations (defaults to FEED_FORMULATOR_SAVES_DIR or ./saves).",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=None,
        help="Logging level (defaults to FEED_FORMULATOR_LOG_LEVEL or WARNING).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    calc = sub.add_parser("calculate", help="Calculate a formulation from a JSON request.")
    calc.add_argument("request", help="Path to the request JSON, or - for stdin.")
    calc.add_argument("--catalog", default=None, help="CSV/Excel catalog supplying the ingredients.")
    calc.add_argument("--save", action="store_true", help="Store the formulation.")
    calc.add_argument("--export", default=None, help="Write the result views to an .xlsx file.")
    calc.set_defaults(handler=cmd_calculate)

    lst = sub.add_parser("list", help="List stored formulations, newest first.")
    lst.set_defaults(handler=cmd_list)

    show = sub.add_parser("show", help="Show a stored formulation.")
    show.add_argument("formulation_id")
    show.set_defaults(handler=cmd_show)

    delete = sub.add_parser("delete", help="Delete a stored formulation.")
    delete.add_argument("formulation_id")
    delete.set_defaults(handler=cmd_delete)

    ingredients = sub.add_parser("ingredients", help="List catalog ingredients by name.")
    ingredients.add_argument("catalog")
    ingredients.add_argument("--category", default=None)
    ingredients.add_argument("--search", default=None)
    ingredients.set_defaults(handler=cmd_ingredients)

    categories = sub.add_parser("categories", help="List the categories of a catalog.")
    categories.add_argument("catalog")
    categories.set_defaults(handler=cmd_categories)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    container = Container(saves_directory=args.saves_dir)
    try:
        return args.handler(container, args)
    except FeedFormulatorError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
