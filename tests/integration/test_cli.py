"""
Tests for the bakery-costing command-line interface.

Commands run through main() against the in-memory test database.
"""

import pytest

from bakery_costing.main import build_parser, main
from bakery_costing.services import ingredient_service, recipe_service


@pytest.fixture
def crackers(test_db):
    flour = ingredient_service.create_ingredient(
        {"name": "Test flour", "pack_quantity": 1, "pack_unit": "kg", "pack_price": "2.40"}
    )
    return recipe_service.create_recipe(
        {
            "name": "Flour crackers",
            "yield_quantity": 10,
            "yield_unit": "each",
            "selling_price": "0.30",
        },
        [{"ingredient_id": flour.id, "quantity": 250, "unit": "g", "section": "Dough"}],
    )


class TestConvert:
    def test_volume(self, capsys):
        assert main(["convert", "1", "cup", "ml"]) == 0
        assert capsys.readouterr().out.strip() == "1 cup = 236.588 ml"

    def test_with_density(self, capsys):
        assert main(["convert", "2", "cup", "g", "--density", "0.6"]) == 0
        assert capsys.readouterr().out.strip() == "2 cup = 283.9056 g"

    def test_missing_density(self, capsys):
        assert main(["convert", "1", "cup", "g"]) == 1
        out = capsys.readouterr().out
        assert out.startswith("ERROR: ")
        assert "Density" in out

    def test_unknown_unit(self, capsys):
        assert main(["convert", "1", "handful", "g"]) == 1
        assert "Unknown unit: 'handful'" in capsys.readouterr().out

    def test_count_to_mass(self, capsys):
        assert main(["convert", "3", "each", "g", "--density", "1"]) == 1
        assert "incompatible unit kinds" in capsys.readouterr().out


class TestDatabaseCommands:
    def test_init_db(self, test_db, capsys):
        assert main(["init-db"]) == 0
        assert capsys.readouterr().out.strip() == "Database ready: sqlite:///:memory:"

    def test_add_ingredient(self, test_db, capsys):
        code = main(["add-ingredient", "Plain flour", "1.5", "kg", "1.20", "--category", "Flour"])
        assert code == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "Added ingredient 1: Plain flour (1.5 kg for £1.20)"
        assert lines[1] == "  Density: 0.6 g/ml"

    def test_add_invalid_ingredient(self, test_db, capsys):
        assert main(["add-ingredient", "Flour", "0", "kg", "1.20"]) == 1
        assert "Validation failed" in capsys.readouterr().out

    def test_cost_recipe(self, crackers, capsys):
        assert main(["cost-recipe", str(crackers.id)]) == 0

        out = capsys.readouterr().out
        assert out.startswith("Flour crackers (yield 10 each)")
        assert "[Dough]" in out
        assert "Test flour" in out
        assert "Total cost: £0.60" in out
        assert "Cost per each: £0.0600" in out
        assert "COGS: 20.0%" in out

    def test_cost_recipe_scaled(self, crackers, capsys):
        assert main(["cost-recipe", str(crackers.id), "--scale", "2"]) == 0

        out = capsys.readouterr().out
        assert "(yield 20 each)" in out
        assert "Total cost: £1.20" in out
        assert "COGS: 20.0%" in out

    def test_cost_missing_recipe(self, test_db, capsys):
        assert main(["cost-recipe", "999"]) == 1
        assert capsys.readouterr().out.strip() == "ERROR: Recipe with ID 999 not found"

    def test_report(self, crackers, capsys):
        assert main(["report"]) == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("Recipe")
        assert lines[1].startswith("Flour crackers")
        assert lines[1].rstrip().endswith("20.0%")

    def test_report_empty(self, test_db, capsys):
        assert main(["report", "--category", "Breads"]) == 0
        assert capsys.readouterr().out.strip() == "No recipes found"


class TestParser:
    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "usage: bakery-costing" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert "bakery-costing 0.1.0" in capsys.readouterr().out
