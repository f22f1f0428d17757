#!/usr/bin/env python3
"""Tests for percentage idioms, phrase templates and operator words."""

from spoken_math.normalization.pipeline import OperatorStage, PercentageStage, apply_percentage_operations


def squash(text: str) -> str:
    return " ".join(text.split())


class TestPercentageIdioms:
    """Symbolic percentage idioms, independent of language tables."""

    def test_five_idioms(self):
        test_cases = [
            ("20% of 150", "(150 * 20 / 100)"),
            ("add 10% to 200", "(200 * (1 + 10 / 100))"),
            ("200 + 10%", "(200 * (1 + 10 / 100))"),
            ("subtract 15% from 80", "(80 * (1 - 15 / 100))"),
            ("80 - 15%", "(80 * (1 - 15 / 100))"),
        ]

        for input_text, expected in test_cases:
            result = apply_percentage_operations(input_text)
            assert result == expected, f"Input '{input_text}' should normalize to '{expected}', got '{result}'"

    def test_every_occurrence_is_rewritten(self):
        result = apply_percentage_operations("10% of 50 + 20% of 100")
        assert result == "(50 * 10 / 100) + (100 * 20 / 100)"

    def test_percent_of_in_other_languages(self):
        test_cases = [
            ("20% de 150", "(150 * 20 / 100)"),
            ("20% von 150", "(150 * 20 / 100)"),
            ("20% di 150", "(150 * 20 / 100)"),
            ("ajouter 10% à 200", "(200 * (1 + 10 / 100))"),
        ]

        for input_text, expected in test_cases:
            result = apply_percentage_operations(input_text)
            assert result == expected, f"Input '{input_text}' should normalize to '{expected}', got '{result}'"

    def test_decimal_comma_and_stray_spaces_in_numbers(self):
        test_cases = [
            ("2,5% of 80", "(80 * 2.5 / 100)"),
            ("12 . 5% of 80", "(80 * 12.5 / 100)"),
        ]

        for input_text, expected in test_cases:
            result = apply_percentage_operations(input_text)
            assert result == expected, f"Input '{input_text}' should normalize to '{expected}', got '{result}'"

    def test_verbs_inside_other_words_do_not_fire(self):
        assert apply_percentage_operations("readd 10% to 200") == "readd 10% to 200"

    def test_plain_arithmetic_is_untouched(self):
        for input_text in ["5 + 3", "10 - 2", "50%"]:
            assert apply_percentage_operations(input_text) == input_text


class TestSpokenPercentages:
    """Percent words are turned into "%" before the idioms run."""

    def test_spoken_percent_words(self, en_compiled):
        stage = PercentageStage(en_compiled)
        test_cases = [
            ("10 percent of 200", "(200 * 10 / 100)"),
            ("add 10 percent to 200", "(200 * (1 + 10 / 100))"),
            ("5 plus 3 percent", "(5 * (1 + 3 / 100))"),
            ("50 minus 20 percent", "(50 * (1 - 20 / 100))"),
            ("5 plus 3% of 200", "5 + (200 * 3 / 100)"),
            ("7 percent", "7%"),
        ]

        for input_text, expected in test_cases:
            result = stage(input_text)
            assert result == expected, f"Input '{input_text}' should normalize to '{expected}', got '{result}'"

    def test_spoken_percent_words_in_other_languages(self, compiled):
        test_cases = [
            ("fr", "10 pour cent de 200", "(200 * 10 / 100)"),
            ("es", "20 por ciento de 150", "(150 * 20 / 100)"),
            ("de", "20 prozent von 150", "(150 * 20 / 100)"),
            ("pt", "10 por cento de 200", "(200 * 10 / 100)"),
            ("it", "10 per cento di 200", "(200 * 10 / 100)"),
            ("es", "50 menos 10 por ciento", "(50 * (1 - 10 / 100))"),
        ]

        for language, input_text, expected in test_cases:
            result = PercentageStage(compiled(language))(input_text)
            assert result == expected, f"Input '{input_text}' should normalize to '{expected}', got '{result}'"


class TestPhraseTemplates:
    """Two-operand phrases keep their operand order."""

    def test_english_phrases(self, en_compiled):
        stage = OperatorStage(en_compiled)
        test_cases = [
            ("add 2 to 3", "2 + 3"),
            ("subtract 3 from 10", "10 - 3"),
            ("multiply 6 by 7", "6 * 7"),
            ("divide 20 by 4", "20 / 4"),
            ("divide 2.5 by 0.5", "2.5 / 0.5"),
        ]

        for input_text, expected in test_cases:
            result = squash(stage(input_text))
            assert result == expected, f"Input '{input_text}' should normalize to '{expected}', got '{result}'"

    def test_phrases_in_other_languages(self, compiled):
        test_cases = [
            ("es", "restar 3 de 10", "10 - 3"),
            ("es", "dividir 100 entre 4", "100 / 4"),
            ("pt", "somar 2 a 3", "2 + 3"),
            ("fr", "soustraire 3 de 10", "10 - 3"),
            ("de", "teile 20 durch 4", "20 / 4"),
            ("it", "sottrarre 3 da 10", "10 - 3"),
        ]

        for language, input_text, expected in test_cases:
            result = squash(OperatorStage(compiled(language))(input_text))
            assert result == expected, f"Input '{input_text}' should normalize to '{expected}', got '{result}'"


class TestOperatorWords:
    """Operator words become canonical symbols."""

    def test_english_operator_words(self, en_compiled):
        stage = OperatorStage(en_compiled)
        test_cases = [
            ("5 plus 3", "5 + 3"),
            ("5 minus 3", "5 - 3"),
            ("5 times 3", "5 * 3"),
            ("6 divided by 3", "6 / 3"),
            ("6 over 3", "6 / 3"),
            ("2 to the power of 3", "2 ^ 3"),
            ("2 raised to 3", "2 ^ 3"),
            ("square root of 16", "sqrt 16"),
            ("open parenthesis 2 plus 3 close parenthesis", "( 2 + 3 )"),
            ("20 percent of 150", "20 * 0.01 * 150"),
        ]

        for input_text, expected in test_cases:
            result = squash(stage(input_text))
            assert result == expected, f"Input '{input_text}' should normalize to '{expected}', got '{result}'"

    def test_percent_of_is_skipped_when_a_percent_sign_is_present(self, en_compiled):
        result = squash(OperatorStage(en_compiled)("5% plus 3 percent of 2"))
        assert "0.01" not in result
        assert result == "5% + 3 % of 2"

    def test_longest_form_wins_across_categories(self, compiled):
        es = compiled("es")

        # "por" alone is multiplication, "dividido por" is division
        assert es.multiplication.sub(" * ", "100 dividido por 4") == "100 dividido por 4"
        assert es.division.sub(" / ", "100 dividido por 4") == "100  /  4"

        stage = OperatorStage(es)
        test_cases = [
            ("100 dividido por 4", "100 / 4"),
            ("5 por 3", "5 * 3"),
            ("5 multiplicado por 3", "5 * 3"),
            ("2 elevado a 3", "2 ^ 3"),
        ]

        for input_text, expected in test_cases:
            result = squash(stage(input_text))
            assert result == expected, f"Input '{input_text}' should normalize to '{expected}', got '{result}'"

    def test_italian_per_is_multiplication_unless_division(self, compiled):
        stage = OperatorStage(compiled("it"))
        test_cases = [
            ("6 per 7", "6 * 7"),
            ("100 diviso per 4", "100 / 4"),
            ("6 moltiplicato per 7", "6 * 7"),
        ]

        for input_text, expected in test_cases:
            result = squash(stage(input_text))
            assert result == expected, f"Input '{input_text}' should normalize to '{expected}', got '{result}'"

    def test_operator_words_need_word_boundaries(self, en_compiled):
        result = squash(OperatorStage(en_compiled)("surplus 5"))
        assert result == "surplus 5"

    def test_word_matcher_search(self, compiled):
        es = compiled("es")
        assert es.division.search("100 dividido por 4")
        assert not es.multiplication.search("100 dividido por 4")
        assert es.multiplication.search("5 por 3")
