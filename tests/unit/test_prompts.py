import unittest

from career_data_api.core.prompts import DocumentKind, build_system_prompt


class TestSystemPrompt(unittest.TestCase):
    def test_prompt_embeds_context_and_guidelines(self) -> None:
        """Test the context sits between persona and guidelines."""
        prompt = build_system_prompt(DocumentKind.RESUME, "## Profile\nName: Jane")

        self.assertIn("## Profile\nName: Jane", prompt)
        self.assertLess(prompt.index("# Career Data"), prompt.index("# Guidelines"))
        self.assertIn("## Output format", prompt)
        self.assertTrue(prompt.startswith("You are an expert resume writer"))

    def test_prompt_is_stable_for_same_inputs(self) -> None:
        """Test identical inputs give a byte-identical prompt."""
        first = build_system_prompt("cover-letter", "ctx")
        second = build_system_prompt(DocumentKind.COVER_LETTER, "ctx")
        self.assertEqual(first, second)

    def test_prompts_differ_by_kind(self) -> None:
        """Test each document kind gets its own instructions."""
        prompts = {build_system_prompt(kind, "ctx") for kind in DocumentKind}
        self.assertEqual(len(prompts), 3)

    def test_unknown_kind_raises(self) -> None:
        """Test an unsupported kind is rejected."""
        with self.assertRaises(ValueError):
            build_system_prompt("haiku", "ctx")


if __name__ == "__main__":
    unittest.main()
