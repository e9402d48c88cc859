import pytest

from conftest import col
from tablegen.core.key_analyzer import analyze
from tablegen.core.naming import class_name, module_name, quote_literal
from tablegen.core.synthesizer import python_default, render_base, render_extended, render_package_init
from tablegen.core.type_resolver import resolve_columns
from tablegen.models.column import ForeignKey


def render(table, columns, samples=("0", "1"), **kwargs):
    fields = resolve_columns(columns, lambda c: list(samples))
    return render_base(table, "shop", fields, analyze(fields), **kwargs)


USERS = [
    col("id", "int", key="PRI", extra="auto_increment"),
    col("name", "varchar", column_type="varchar(64)"),
    col("active", "tinyint", column_type="tinyint(1)", default="1"),
    col("nickname", "varchar", nullable=True, default="NULL"),
    col("created_at", "datetime", nullable=True),
]

ORDER_ITEMS = [
    col("order_id", "int", key="PRI"),
    col("line", "int", key="PRI"),
    col("sku", "varchar", nullable=True),
]

AUDIT_LOG = [
    col("message", "text", nullable=True),
    col("level", "int"),
]


def test_generated_source_compiles():
    for table, columns in (("users", USERS), ("order_items", ORDER_ITEMS), ("audit_log", AUDIT_LOG)):
        compile(render(table, columns), f"{table}_base.py", "exec")


def test_fields_follow_catalog_order():
    source = render("users", USERS)
    positions = [source.index(f'FieldSpec(attr="{name}"') for name in ("id", "name", "active", "nickname", "created_at")]
    assert positions == sorted(positions)
    assert '_SELECT = "SELECT `id`, `name`, `active`, `nickname`, `created_at` FROM `users`"' in source


def test_record_and_shadow_types():
    source = render("users", USERS)
    assert "class Users:" in source
    assert "    id: int = 0" in source
    assert "    active: bool = True" in source
    assert "    nickname: Optional[str] = None" in source
    assert "    created_at: Optional[datetime] = None" in source
    assert "class _UsersRow(NamedTuple):" in source
    assert "    id: Optional[int]" in source


def test_null_default_is_empty_in_field_table():
    source = render("users", USERS)
    assert 'column="nickname", default="",' in source
    assert 'column="active", default="1", column_type="tinyint(1)", key="", null="NO", extra="", kind="bool"' in source


def test_single_key_crud():
    source = render("users", USERS)
    assert "def primary_key_info(self) -> tuple[str, object]:" in source
    assert 'return "id", self.id' in source
    assert "new_record = is_empty_key(self.id)" in source
    assert "self.id = res.lastrowid" in source
    assert "def read_by_key(id: int) -> Optional[Users]:" in source
    assert 'return read_one_by_query("`id` = ?", id)' in source
    assert 'return execute("DELETE FROM `users` WHERE `id` = ?", self.id)' in source


def test_composite_key_crud():
    source = render("order_items", ORDER_ITEMS)
    assert "def primary_key_info" not in source
    assert "new_record" not in source
    assert "lastrowid" not in source
    assert "def read_by_key(order_id: int, line: int) -> Optional[OrderItems]:" in source
    assert 'return read_one_by_query("`order_id` = ? AND `line` = ?", order_id, line)' in source
    assert '"DELETE FROM `order_items` WHERE `order_id` = ? AND `line` = ?", self.order_id, self.line' in source


def test_keyless_table_is_read_only():
    source = render("audit_log", AUDIT_LOG)
    assert "def save" not in source
    assert "def delete" not in source
    assert "read_by_key" not in source
    assert "build_upsert" not in source
    assert "def read_all(" in source
    assert "def read_by_query(" in source
    assert "def read_one_by_query(" in source


def test_name_funcs_embeds_table_name():
    source = render("order_items", ORDER_ITEMS, name_funcs=True)
    for name in ("save_order_items", "delete_order_items", "read_order_items_by_key", "read_all_order_items",
                 "read_order_items_by_query", "read_one_order_items_by_query", "execute_order_items"):
        assert f"def {name}(" in source
    assert "def read_all(" not in source


def test_text_default_is_escaped():
    columns = [col("id", "int", key="PRI"), col("motto", "varchar", default='say "hi"\\now')]
    source = render("quotes", columns)
    assert 'motto: str = "say \\"hi\\"\\\\now"' in source
    compile(source, "quotes_base.py", "exec")


def test_generated_default_uses_zero_value():
    columns = [col("id", "int", key="PRI"), col("seen", "timestamp", default="CURRENT_TIMESTAMP",
                                                  extra="DEFAULT_GENERATED")]
    fields = resolve_columns(columns, lambda c: [])
    assert python_default(fields[1]) == "EMPTY_TIME"
    assert "EMPTY_TIME" in render("visits", columns)


def test_reserved_key_parameter():
    columns = [col("type", "varchar", key="PRI"), col("label", "varchar", nullable=True)]
    source = render("kinds", columns)
    assert "def read_by_key(obj_type: str) -> Optional[Kinds]:" in source


def test_colliding_key_columns_get_distinct_parameters():
    columns = [col("a b", "int", key="PRI"), col("a_b", "int", key="PRI"), col("note", "varchar", nullable=True)]
    source = render("pairs", columns)
    assert "def read_by_key(a_b: int, a_b_2: int) -> Optional[Pairs]:" in source
    compile(source, "pairs_base.py", "exec")


def test_foreign_key_accessor():
    columns = [col("id", "int", key="PRI"), col("customer_id", "int", nullable=True)]
    source = render(
        "orders", columns,
        foreign_keys=[ForeignKey(column="customer_id", referred_table="customers", referred_column="id")],
        models_package="app.models",
    )
    assert "def customers_by_customer_id(self):" in source
    assert "from app.models.customers.customers_base import read_one_by_query as read_referenced" in source
    compile(source, "orders_base.py", "exec")


def test_render_is_deterministic():
    assert render("users", USERS) == render("users", USERS)


def test_render_without_fields_fails():
    with pytest.raises(ValueError):
        render_base("empty", "shop", [], analyze([]))


def test_double_quote_identifiers():
    source = render("order_items", ORDER_ITEMS, quote_char='"')
    assert 'read_one_by_query("\\"order_id\\" = ? AND \\"line\\" = ?", order_id, line)' in source


def test_extended_and_package_init():
    ext = render_extended("order_items", "models")
    assert "from models.order_items.order_items_base import OrderItems, read_by_query, read_one_by_query" in ext
    init = render_package_init("order_items", "models")
    assert "from models.order_items.order_items_base import *" in init
    assert "from models.order_items.order_items_extended import *" in init


def test_naming_helpers():
    assert class_name("order_items") == "OrderItems"
    assert class_name("2fa_codes") == "T2faCodes"
    assert module_name("Order-Items") == "order_items"
    assert quote_literal('a"b\\c\n') == '"a\\"b\\\\c\\n"'
