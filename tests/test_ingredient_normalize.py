import pytest

from recipe_capture.services.ingredient_normalize import (
    AIParsedIngredient,
    IngredientNormalizer,
    to_parsed_ingredient,
)

AI_ANSWERS = {
    "2 cups flour": AIParsedIngredient(name="Flour", quantity=2, unit="cups"),
    "salt": AIParsedIngredient(name="salt"),
    "2-3 cloves garlic, minced": AIParsedIngredient(
        name="garlic", range_min=2, range_max=3, unit="cloves", preparation="minced"
    ),
}


async def _answer(prompt, response_model, **kwargs):
    line = prompt.split(": ", 1)[1]
    if line == "3 eggs":
        raise RuntimeError("model exploded")
    return AI_ANSWERS.get(line)


@pytest.mark.asyncio
async def test_ai_answers_are_used(fake_ai):
    fake_ai.generate_structured.side_effect = _answer
    result = await IngredientNormalizer(fake_ai).normalize(["2 cups flour", "2-3 cloves garlic, minced"])

    flour, garlic = result
    assert (flour.name, flour.quantity, flour.unit, flour.confidence) == ("flour", 2, "cup", 0.9)
    assert (garlic.range.min, garlic.range.max) == (2, 3)
    assert garlic.unit == "clove"
    assert garlic.preparation == "minced"


@pytest.mark.asyncio
async def test_failed_lines_fall_back_to_local_parse(fake_ai):
    fake_ai.generate_structured.side_effect = _answer
    result = await IngredientNormalizer(fake_ai).normalize(
        ["2 cups flour", "3 eggs", "1 tbsp honey", "salt"]
    )

    assert [r.name for r in result] == ["flour", "eggs", "honey", "salt"]
    assert [r.original for r in result] == ["2 cups flour", "3 eggs", "1 tbsp honey", "salt"]
    eggs, honey = result[1], result[2]
    assert eggs.quantity == 3
    assert honey.unit == "tablespoon"
    assert fake_ai.generate_structured.await_count == 4


@pytest.mark.asyncio
async def test_missing_ai_quantity_is_zero(fake_ai):
    fake_ai.generate_structured.side_effect = _answer
    (salt,) = await IngredientNormalizer(fake_ai).normalize(["salt"])

    assert salt.quantity == 0.0
    assert salt.unit == ""


@pytest.mark.asyncio
async def test_unavailable_ai_parses_locally(fake_ai):
    fake_ai.is_available.return_value = False
    result = await IngredientNormalizer(fake_ai).normalize(["2 cups flour", "or", "  "])

    assert [r.name for r in result] == ["flour"]
    fake_ai.generate_structured.assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_batch(fake_ai):
    assert await IngredientNormalizer(fake_ai).normalize([]) == []


def test_empty_ai_name_is_rejected():
    with pytest.raises(ValueError):
        to_parsed_ingredient(AIParsedIngredient(name="  "), "???")
