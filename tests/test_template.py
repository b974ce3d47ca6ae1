from __future__ import annotations

import unittest

from core.template import TemplateError, expand_env_vars, extract_placeholders, render_placeholders


class RenderPlaceholderTests(unittest.TestCase):
    def test_render_known_placeholders(self) -> None:
        self.assertEqual(
            render_placeholders('namespace = "{{ namespace }}"', {"namespace": "com.example.app"}),
            'namespace = "com.example.app"',
        )

    def test_unknown_placeholders_are_kept(self) -> None:
        self.assertEqual(render_placeholders("{{a}}-{{b}}", {"a": 1}), "1-{{b}}")

    def test_strict_mode_raises(self) -> None:
        with self.assertRaises(TemplateError):
            render_placeholders("{{b}}", {}, strict=True)

    def test_extract_placeholders_nested(self) -> None:
        value = {"a": "{{x}}", "b": ["{{ y }}", {"c": "{{x}}"}], "d": 3}
        self.assertEqual(extract_placeholders(value), {"x", "y"})


class ExpandEnvVarsTests(unittest.TestCase):
    def test_both_forms(self) -> None:
        env = {"ORG": "com.example", "NAME": "demo"}
        self.assertEqual(expand_env_vars("$ORG.${NAME}_app", env), "com.example.demo_app")

    def test_lone_dollar_is_literal(self) -> None:
        self.assertEqual(expand_env_vars("cost: $ 5", {}), "cost: $ 5")

    def test_missing_variable(self) -> None:
        with self.assertRaises(TemplateError) as ctx:
            expand_env_vars("${NOPE}", {})
        self.assertIn("Missing env var: NOPE", str(ctx.exception))

    def test_unclosed_reference(self) -> None:
        with self.assertRaises(TemplateError) as ctx:
            expand_env_vars("${HOME", {"HOME": "/root"})
        self.assertIn("Unclosed env var", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
