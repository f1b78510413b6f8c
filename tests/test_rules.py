"""Tests for the pattern rule catalog."""

import pytest

from smart_validator.models import Category, Severity
from smart_validator.rules import CATALOG, RULES_BY_ID, all_targets, categories_for, run_rules
from smart_validator.rules import config as config_rules
from smart_validator.rules import database, edge_functions, frontend, jsx
from smart_validator.rules.database import created_tables

from helpers import SAFE_HANDLER, UNSAFE_HANDLER

COMPONENT = "src/components/Card.tsx"
HANDLER = "supabase/functions/scrape-recipe/index.ts"
MIGRATION = "supabase/migrations/20240101_init.sql"


def _ids(findings):
    return [f.rule_id for f in findings]


class TestCatalog:
    """Tests for catalog wiring."""

    def test_rule_ids_are_unique(self):
        assert len(RULES_BY_ID) == len(CATALOG)

    def test_expected_rules_and_severities(self):
        expected = {
            "void-not-self-closed": Severity.warning,
            "unkeyed-mapped-render": Severity.warning,
            "dangerous-class-binding": Severity.warning,
            "missing-auth-check": Severity.error,
            "missing-cors-headers": Severity.warning,
            "missing-input-validation": Severity.warning,
            "sensitive-logging": Severity.error,
            "unprotected-fetch": Severity.error,
            "missing-image-size-check": Severity.warning,
            "missing-row-level-security": Severity.warning,
            "direct-identity-table-reference": Severity.error,
            "missing-role-table": Severity.warning,
            "unsafe-html-injection": Severity.error,
            "hardcoded-secret": Severity.error,
            "client-side-role-check": Severity.warning,
            "fetch-without-timeout": Severity.warning,
            "jwt-verification-disabled": Severity.error,
            "missing-validation-dependency": Severity.warning,
        }
        assert {rule_id: rule.severity for rule_id, rule in RULES_BY_ID.items()} == expected

    def test_fix_snippets_are_static(self):
        for rule in CATALOG:
            if rule.fix is not None:
                assert rule.fix() == rule.fix()
                assert rule.fix().strip()

    def test_all_targets_deduplicated(self):
        targets = all_targets()
        assert len(targets) == len(set(targets))
        assert "supabase/migrations/*.sql" in targets
        assert "package.json" in targets

    @pytest.mark.parametrize("path,expected", [
        ("src/App.tsx", [Category.jsx_correctness, Category.frontend_security]),
        ("src/components/List.jsx", [Category.jsx_correctness]),
        ("src/lib/api.ts", [Category.frontend_security]),
        (HANDLER, [Category.edge_function_security]),
        (MIGRATION, [Category.database_security]),
        ("supabase/config.toml", [Category.config_security]),
        ("package.json", [Category.config_security]),
        ("README.md", []),
    ])
    def test_categories_for(self, path, expected):
        assert categories_for(path) == expected

    def test_run_rules_attaches_fix(self):
        findings = run_rules(Category.frontend_security, "src/App.tsx", "<div dangerouslySetInnerHTML={{ __html: x }} />")
        assert _ids(findings) == ["unsafe-html-injection"]
        assert "DOMPurify.sanitize" in findings[0].fix_suggestion

    def test_run_rules_skips_other_categories(self):
        content = "<br>\n<div dangerouslySetInnerHTML={{ __html: x }} />"
        findings = run_rules(Category.jsx_correctness, "src/App.tsx", content)
        assert _ids(findings) == ["void-not-self-closed"]


class TestVoidElements:
    """Tests for void-not-self-closed."""

    @pytest.mark.parametrize("element", ["br", "hr", "img", "input"])
    def test_open_void_tag_flagged(self, element):
        content = f"<div>\n  <{element}>\n</div>"
        findings = jsx.detect_void_not_self_closed(content, COMPONENT)

        assert len(findings) == 1
        assert findings[0].line == 2
        assert findings[0].message == f"<{element}> should be self-closing: <{element} />"
        assert findings[0].severity == Severity.warning

    @pytest.mark.parametrize("element", ["br", "hr", "img", "input"])
    def test_self_closed_void_tag_clean(self, element):
        content = f"<div>\n  <{element} />\n  <{element}/>\n</div>"
        assert jsx.detect_void_not_self_closed(content, COMPONENT) == []

    def test_attributes_are_allowed(self):
        content = '<img src="a.png" alt="cover">\n<img src="b.png" alt="thumb" />'
        findings = jsx.detect_void_not_self_closed(content, COMPONENT)
        assert [f.line for f in findings] == [1]

    def test_similar_tag_names_ignored(self):
        content = "<header>\n<button>\n<hrule>"
        assert jsx.detect_void_not_self_closed(content, COMPONENT) == []

    def test_one_finding_per_line_and_element(self):
        findings = jsx.detect_void_not_self_closed("<br><br><hr>", COMPONENT)
        assert sorted(f.message.split(">")[0] for f in findings) == ["<br", "<hr"]


class TestUnkeyedMappedRender:
    """Tests for unkeyed-mapped-render."""

    LIST = "const List = ({ items }) => {\n  return items.map((item) => <li>{item.name}</li>);\n};"

    def test_flagged_without_key(self):
        findings = jsx.detect_unkeyed_mapped_render(self.LIST, COMPONENT)
        assert _ids(findings) == ["unkeyed-mapped-render"]
        assert findings[0].message == "Missing 'key' prop in mapped elements"

    def test_adding_key_clears_finding(self):
        keyed = self.LIST.replace("<li>", "<li key={item.id}>")
        assert jsx.detect_unkeyed_mapped_render(keyed, COMPONENT) == []

    def test_map_without_return_ignored(self):
        assert jsx.detect_unkeyed_mapped_render("const ids = items.map((i) => i.id);", COMPONENT) == []


class TestDangerousClassBinding:
    """Tests for dangerous-class-binding."""

    def test_undefined_in_class_binding(self):
        content = 'const A = () => (\n  <div className={active ? "on" : undefined} />\n);'
        findings = jsx.detect_dangerous_class_binding(content, COMPONENT)

        assert _ids(findings) == ["dangerous-class-binding"]
        assert findings[0].line == 2
        assert findings[0].severity == Severity.warning

    def test_plain_class_binding_clean(self):
        assert jsx.detect_dangerous_class_binding('<div className={styles.card} />', COMPONENT) == []


class TestEdgeFunctionRules:
    """Tests for edge function handler rules."""

    def _run(self, content):
        return run_rules(Category.edge_function_security, HANDLER, content)

    def test_missing_auth_check(self):
        findings = edge_functions.detect_missing_auth_check(UNSAFE_HANDLER, HANDLER)

        assert len(findings) == 1
        assert findings[0].line == 3
        assert findings[0].message == "Edge Function 'scrape-recipe' lacks authentication check"

    def test_adding_auth_call_clears_finding(self):
        content = UNSAFE_HANDLER.replace(
            "serve(async (req) => {\n",
            "serve(async (req) => {\n  const { data } = await supabase.auth.getUser();\n",
        )
        assert edge_functions.detect_missing_auth_check(content, HANDLER) == []

    def test_unsafe_handler_findings(self):
        findings = self._run(UNSAFE_HANDLER)
        assert _ids(findings) == [
            "missing-auth-check",
            "missing-cors-headers",
            "missing-input-validation",
            "unprotected-fetch",
        ]
        assert all(f.fix_suggestion for f in findings)

    def test_safe_handler_clean(self):
        assert self._run(SAFE_HANDLER) == []

    def test_sensitive_logging(self):
        content = SAFE_HANDLER + "\nconsole.log(req.body);\n"
        assert _ids(self._run(content)) == ["sensitive-logging"]

    def test_image_size_check(self):
        content = SAFE_HANDLER + "\nconst { imageBase64 } = payload;\n"
        assert _ids(self._run(content)) == ["missing-image-size-check"]

        bounded = content + "if (imageBase64.length > MAX_IMAGE_SIZE) throw new Error('too large');\n"
        assert self._run(bounded) == []

    def test_non_handler_file_not_matched(self):
        assert run_rules(Category.edge_function_security, "supabase/functions/_shared/cors.ts", UNSAFE_HANDLER) == []


class TestDatabaseRules:
    """Tests for migration rules."""

    def test_rls_missing_on_one_of_two_tables(self):
        sql = (
            "CREATE TABLE recipes (id uuid PRIMARY KEY);\n"
            "CREATE TABLE ingredients (id uuid PRIMARY KEY);\n"
            "ALTER TABLE recipes ENABLE ROW LEVEL SECURITY;\n"
        )
        findings = database.detect_missing_row_level_security(sql, MIGRATION)

        assert len(findings) == 1
        assert findings[0].message == "Table 'ingredients' may lack RLS policies"
        assert findings[0].line == 2

    def test_rls_requires_exact_table_name(self):
        sql = (
            "CREATE TABLE IF NOT EXISTS recipes (id uuid);\n"
            "CREATE TABLE recipes_archive (id uuid);\n"
            "ALTER TABLE recipes_archive ENABLE ROW LEVEL SECURITY;\n"
        )
        findings = database.detect_missing_row_level_security(sql, MIGRATION)
        assert [f.message for f in findings] == ["Table 'recipes' may lack RLS policies"]

    def test_created_tables_deduplicated(self):
        sql = "create table notes (id int);\nCREATE TABLE notes (id int);"
        assert created_tables(sql) == [("notes", 1)]

    def test_foreign_key_to_identity_table_allowed(self):
        sql = "CREATE TABLE profiles (user_id uuid REFERENCES auth.users(id));"
        assert database.detect_direct_identity_table_reference(sql, MIGRATION) == []

    def test_direct_identity_table_reference(self):
        sql = (
            "CREATE TABLE profiles (user_id uuid REFERENCES auth.users(id));\n"
            "CREATE VIEW emails AS SELECT email FROM auth.users;\n"
        )
        findings = database.detect_direct_identity_table_reference(sql, MIGRATION)

        assert _ids(findings) == ["direct-identity-table-reference"]
        assert findings[0].line == 2

    def test_missing_role_table(self):
        assert _ids(database.detect_missing_role_table("CREATE TABLE posts (id int);", MIGRATION)) == ["missing-role-table"]
        assert database.detect_missing_role_table("CREATE TABLE user_roles (id int);", MIGRATION) == []
        assert database.detect_missing_role_table("SELECT 1;", MIGRATION) == []

    def test_rls_fix_is_a_template(self):
        findings = run_rules(Category.database_security, MIGRATION, "CREATE TABLE posts (id int);\n")
        rls = [f for f in findings if f.rule_id == "missing-row-level-security"][0]
        assert "ENABLE ROW LEVEL SECURITY" in rls.fix_suggestion


class TestFrontendRules:
    """Tests for frontend source rules."""

    PATH = "src/pages/Profile.tsx"

    def test_unsafe_html_injection(self):
        content = "<div dangerouslySetInnerHTML={{ __html: bio }} />"
        assert _ids(frontend.detect_unsafe_html_injection(content, self.PATH)) == ["unsafe-html-injection"]

        sanitized = "import DOMPurify from 'dompurify';\n" + content
        assert frontend.detect_unsafe_html_injection(sanitized, self.PATH) == []

    def test_hardcoded_secret_one_finding_per_file(self):
        content = 'const a = "sk-abcdefghijklmnopqrstuvwxyz123456";\nconst b = "pk_abcdefghijklmnopqrstuvwxyz";\n'
        findings = frontend.detect_hardcoded_secret(content, self.PATH)

        assert _ids(findings) == ["hardcoded-secret"]
        assert findings[0].severity == Severity.error

    def test_no_secret_in_ordinary_code(self):
        assert frontend.detect_hardcoded_secret("const apiUrl = import.meta.env.VITE_API_URL;", self.PATH) == []

    @pytest.mark.parametrize("read", [
        "localStorage.getItem('role')",
        'sessionStorage.getItem("role")',
    ])
    def test_client_side_role_check(self, read):
        content = f"const isAdmin = {read} === 'admin';"
        assert _ids(frontend.detect_client_side_role_check(content, self.PATH)) == ["client-side-role-check"]

    def test_fetch_without_timeout(self):
        content = "const res = await fetch('/api/recipes');"
        assert _ids(frontend.detect_fetch_without_timeout(content, self.PATH)) == ["fetch-without-timeout"]

        bounded = "const controller = new AbortController();\n" + content
        assert frontend.detect_fetch_without_timeout(bounded, self.PATH) == []


class TestConfigRules:
    """Tests for project configuration rules."""

    def test_jwt_verification_disabled(self):
        toml = "[functions.scrape-recipe]\nverify_jwt = false\n\n[functions.other]\nverify_jwt = true\n"
        findings = config_rules.detect_jwt_verification_disabled(toml, "supabase/config.toml")

        assert _ids(findings) == ["jwt-verification-disabled"]
        assert findings[0].line == 2

    def test_missing_validation_dependency(self):
        manifest = '{"dependencies": {"react": "^18.2.0"}}'
        findings = config_rules.detect_missing_validation_dependency(manifest, "package.json")
        assert [f.message for f in findings] == ["Zod validation library not found"]

    @pytest.mark.parametrize("section", ["dependencies", "devDependencies"])
    def test_validation_dependency_present(self, section):
        manifest = f'{{"{section}": {{"zod": "^3.22.0"}}}}'
        assert config_rules.detect_missing_validation_dependency(manifest, "package.json") == []

    def test_unparseable_manifest_treated_as_missing(self):
        findings = config_rules.detect_missing_validation_dependency("{not json", "package.json")
        assert _ids(findings) == ["missing-validation-dependency"]
