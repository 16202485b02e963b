import random

from courseconnect.modules.flashcards.distractors import (
    OPTION_COUNT,
    build_options,
    finalize_options,
    generate_distractors,
    parse_number,
)


def _check(options, correct):
    assert len(options) == OPTION_COUNT
    assert len(set(options)) == OPTION_COUNT
    assert correct in options


class TestDomainRules:
    def test_photosynthesis(self):
        correct = "6CO₂ + 6H₂O → C₆H₁₂O₆ + 6O₂"
        options = build_options(
            correct, "What is the equation for photosynthesis?", rng=random.Random(1)
        )
        _check(options, correct)
        assert "CO₂ + H₂O → C₆H₁₂O₆ + O₂" in options

    def test_water_formula(self):
        options = build_options(
            "H₂O", "What is the chemical formula of water?", rng=random.Random(2)
        )
        assert set(options) == {"H₂O", "H₂O₂", "H₂", "O₂"}

    def test_generic_formula(self):
        found = generate_distractors("NaCl", "What is the formula for table salt?")
        assert found == ["CO₂", "CH₄", "NH₃"]


class TestNumericRule:
    def test_integer_answer(self):
        assert generate_distractors("12") == ["13", "11", "24"]

    def test_zero_pads_instead_of_repeating(self):
        options = build_options("0", rng=random.Random(3))
        _check(options, "0")
        assert "Option 4" in options

    def test_large_value_never_equals_answer(self):
        options = build_options("1e20", rng=random.Random(4))
        _check(options, "1e20")
        others = [o for o in options if o != "1e20"]
        assert all(parse_number(o) != 1e20 for o in others)

    def test_non_numeric_is_not_parsed(self):
        assert parse_number("12 apples") is None
        assert parse_number("nan") is None


class TestPhraseRules:
    def test_short_answer_negations(self):
        assert generate_distractors("Paris") == [
            "Not Paris",
            "Alternative to Paris",
            "Different from Paris",
        ]

    def test_long_answer_substitutions(self):
        found = generate_distractors("The cell is the basic unit and it divides")
        assert found == [
            "The cell was the basic unit and it divides",
            "A cell is a basic unit and it divides",
            "The cell is the basic unit or it divides",
        ]

    def test_substitutions_are_whole_word(self):
        found = generate_distractors("This island is a nation state")
        assert found[0] == "This island was a nation state"

    def test_padding_when_nothing_changes(self):
        options = build_options("Mitochondria produce cellular energy", rng=random.Random(5))
        _check(options, "Mitochondria produce cellular energy")
        assert {"Option 2", "Option 3", "Option 4"} <= set(options)


class TestFinalize:
    def test_dedupes_and_keeps_correct(self):
        options = finalize_options("A", ["A", "B", "B", " ", "C", "D", "E"], rng=random.Random(6))
        assert sorted(options) == ["A", "B", "C", "D"]


class TestOptionsSweep:
    QUESTIONS = [
        "",
        "What is the equation for photosynthesis?",
        "What is the chemical formula of water?",
        "What is the formula for table salt?",
        "Define osmosis",
    ]
    WORDS = ["the", "a", "is", "are", "and", "or", "cell", "Option", "2", "water", "H₂O"]

    def _answer(self, rng):
        shape = rng.choice(["blank", "number", "short", "long"])
        if shape == "blank":
            return rng.choice(["", "   "])
        if shape == "number":
            return rng.choice(
                [str(rng.randint(-50, 50)), f"{rng.uniform(-1e3, 1e3):.3f}", "0", "1e20"]
            )
        count = rng.randint(1, 2) if shape == "short" else rng.randint(3, 9)
        return " ".join(rng.choice(self.WORDS) for _ in range(count))

    def test_always_four_unique_with_answer(self):
        rng = random.Random(20240611)
        for _ in range(2000):
            answer = self._answer(rng)
            question = rng.choice(self.QUESTIONS)
            options = build_options(answer, question, rng=rng)
            _check(options, answer.strip())
