from concurrent.futures import ThreadPoolExecutor

from thymescan.parsers.variables import (
    find_all_variable_matches,
    find_iterator_variables,
    find_variable_references,
)


def paths(text):
    return [path for _, path in find_all_variable_matches(text)]


class TestBasicExpressions:

    def test_simple_variable(self):
        assert find_all_variable_matches('<div th:text="${message}">') == [("${message}", "message")]

    def test_utext(self):
        assert paths('<div th:utext="${content}">') == ["content"]

    def test_property_chain_emits_every_prefix(self):
        matches = find_all_variable_matches('<span th:text="${user.address.street}">')
        assert matches == [
            ("${user.address.street}", "user"),
            ("${user.address.street}", "user.address"),
            ("${user.address.street}", "user.address.street"),
        ]

    def test_selection_expression(self):
        assert paths('<input th:field="*{user.name}">') == ["user", "user.name"]

    def test_method_call_chain(self):
        assert paths('<p th:text="${user.getName()}">') == ["user", "user.getName"]

    def test_mixed_quotes(self):
        result = paths("<p th:text='${user.getName(\"Smith\")}'>")
        assert "user" in result
        assert "user.getName" in result

    def test_multiline_expression(self):
        text = (
            '<div th:text="${user.firstName\n'
            "    + ' ' +\n"
            '    user.lastName}">'
        )
        assert paths(text) == ["user", "user.firstName", "user.lastName"]

    def test_index_continues_chain(self):
        assert paths('<p th:text="${items[0].name}">') == ["items", "items.name"]

    def test_string_key_index_is_a_segment(self):
        assert paths("<p th:text=\"${map['key']}\">") == ["map", "map.key"]

    def test_computed_index_is_analyzed(self):
        assert paths('<p th:text="${rows[row.index]}">') == ["rows", "row", "row.index"]


class TestEscapingAndEmptyInput:

    def test_escaped_expression_is_ignored(self):
        assert find_all_variable_matches('<div th:text="\\${user.name}">') == []

    def test_escaped_expression_next_to_real_one(self):
        assert paths('<p>\\${hidden.value} <span th:text="${shown}"></span></p>') == ["shown"]

    def test_no_expressions(self):
        assert find_all_variable_matches("<div class=\"plain\">Hello</div>") == []

    def test_empty_text(self):
        assert find_all_variable_matches("") == []

    def test_unclosed_expression_does_not_hide_the_rest(self):
        text = '<p th:text="${user.">Don\'t</p><p th:text="${title}">'
        assert paths(text) == ["title"]


class TestConditionals:

    def test_th_if(self):
        assert paths('<div th:if="${user.active}">') == ["user", "user.active"]

    def test_th_unless(self):
        assert paths('<div th:unless="${loggedIn}">') == ["loggedIn"]

    def test_th_switch(self):
        assert paths('<div th:switch="${user.role}">') == ["user", "user.role"]

    def test_logical_operators_are_not_variables(self):
        result = paths('<div th:if="${user.active and user.verified or admin}">')
        assert result == ["user", "user.active", "user.verified", "admin"]
        assert "and" not in result
        assert "or" not in result

    def test_ternary(self):
        assert paths("<span th:text=\"${isAdmin ? 'Admin' : 'User'}\">") == ["isAdmin"]

    def test_elvis(self):
        assert paths("<span th:text=\"${user.name ?: 'Anonymous'}\">") == ["user", "user.name"]

    def test_safe_navigation(self):
        assert paths('<span th:text="${user?.address?.city}">') == ["user", "user.address", "user.address.city"]

    def test_complex_condition(self):
        result = paths(
            "<div th:if=\"${user.hasRole('ADMIN') or user.parent.hasApproved()}\">"
        )
        assert "user.hasRole" in result
        assert "user.parent.hasApproved" in result

    def test_literals_are_not_variables(self):
        assert paths("<p th:if=\"${count > 10 and name == 'x' and flag != null}\">") == ["count", "name", "flag"]

    def test_permission_flag_is_a_variable(self):
        matches = find_all_variable_matches('<p th:if="${isAdmin and hasPermission}">')
        assert ("${isAdmin and hasPermission}", "hasPermission") in matches
        assert ("${isAdmin and hasPermission}", "isAdmin") in matches


class TestUtilityObjects:

    def test_strings_utility(self):
        matches = find_all_variable_matches('<p th:text="${#strings.toUpperCase(message)}">')
        assert ("${#strings.toUpperCase(message)}", "message") in matches
        assert all(not path.startswith("#") for _, path in matches)

    def test_temporals_utility(self):
        result = paths("<p th:text=\"${#temporals.format(now, 'dd-MM-yyyy')}\">")
        assert result == ["now"]

    def test_numbers_utility(self):
        assert paths("<p th:text=\"${#numbers.formatDecimal(price, 1, 2)}\">") == ["price"]

    def test_lists_with_filter_argument(self):
        result = paths('<p th:text="${#lists.size(users.?[age > 18])}">')
        assert result == ["users", "age"]

    def test_fields_has_errors(self):
        result = paths("<p th:if=\"${#fields.hasErrors('user.email')}\">")
        assert result == ["user", "user.email"]

    def test_fields_wildcard(self):
        assert paths("<p th:if=\"${#fields.hasErrors('*')}\">") == []

    def test_authentication_principal(self):
        result = paths('<span th:text="${#authentication.principal.username}">')
        assert result == ["principal", "principal.username"]

    def test_vars_scope(self):
        assert paths('<span th:text="${#vars.user.name}">') == ["user", "user.name"]

    def test_security_functions(self):
        result = paths("<div th:if=\"${hasRole('ROLE_ADMIN') and user.isEnabled()}\">")
        assert result == ["user", "user.isEnabled"]

    def test_type_reference(self):
        assert paths('<p th:text="${T(java.lang.Math).max(a, b)}">') == ["a", "b"]

    def test_constructor(self):
        assert paths('<p th:text="${new java.util.Date()}">') == []

    def test_bean_reference(self):
        assert paths('<p th:text="${@userService.findAll(limit)}">') == ["limit"]


class TestCollections:

    def test_selection_filter(self):
        result = paths('<div th:each="u : ${users.?[age > 18]}">')
        assert "users" in result
        assert "age" in result
        assert "users.age" not in result

    def test_filter_on_reserved_property(self):
        result = paths('<div th:if="${users.?[key.length > 5]}">')
        assert "key" in result
        assert "key.length" in result

    def test_aggregate_after_filter_is_excluded(self):
        result = paths('<p th:text="${order.getItems().?[price > 100].size()}">')
        assert result == ["order", "order.getItems", "price"]

    def test_projection(self):
        assert paths('<p th:text="${orders.![total]}">') == ["orders", "total"]


class TestOtherExpressionForms:

    def test_static_link(self):
        assert find_all_variable_matches('<a th:href="@{/home}">') == []

    def test_link_with_parameter(self):
        matches = find_all_variable_matches('<a th:href="@{/user/{id}(id=${userId})}">')
        assert matches == [("${userId}", "userId")]

    def test_dynamic_link(self):
        assert paths('<a th:href="@{${link.url}}">') == ["link", "link.url"]

    def test_message_key_and_arguments(self):
        matches = find_all_variable_matches('<p th:text="#{welcome.message(${user.name})}">')
        assert matches == [
            ("#{welcome.message(${user.name})}", "welcome.message"),
            ("${user.name}", "user"),
            ("${user.name}", "user.name"),
        ]

    def test_fragment_arguments(self):
        matches = find_all_variable_matches(
            '<div th:replace="~{fragments/header :: header(title=${pageTitle})}">'
        )
        assert matches == [("${pageTitle}", "pageTitle")]

    def test_literal_substitution(self):
        assert paths('<p th:text="|Hello, ${user.name}!|">') == ["user", "user.name"]

    def test_inline_expression(self):
        assert paths("<p>Hi [[${user.name}]] and [(${note})]</p>") == ["user", "user.name", "note"]

    def test_parser_level_comment(self):
        assert paths('<!--/* <p th:text="${secret}"></p> */-->') == ["secret"]

    def test_html_comment(self):
        assert find_all_variable_matches("<!-- ${x} -->") == [("${x}", "x")]

    def test_prototype_only_comment(self):
        text = '<!--/*/ <div th:text="${proto.value}"></div> /*/-->'
        assert paths(text) == ["proto", "proto.value"]

    def test_preprocessing(self):
        assert find_all_variable_matches('<div th:text="${__${field}__}">') == [("${field}", "field")]


class TestAttributes:

    def test_th_with(self):
        assert paths('<div th:with="total=${price + tax}">') == ["price", "tax"]

    def test_th_attr(self):
        matches = find_all_variable_matches("<img th:attr=\"src=${image.url},title=${image.alt}\">")
        assert matches == [
            ("${image.url}", "image"),
            ("${image.url}", "image.url"),
            ("${image.alt}", "image"),
            ("${image.alt}", "image.alt"),
        ]

    def test_th_attrappend(self):
        assert paths('<div th:attrappend="class=${extraClass}">') == ["extraClass"]

    def test_th_object(self):
        assert paths('<form th:object="${form}">') == ["form"]

    def test_th_case(self):
        text = '<div th:switch="${user.role}"><p th:case="${roles.admin}">A</p></div>'
        assert paths(text) == ["user", "user.role", "roles", "roles.admin"]

    def test_th_value(self):
        assert paths('<input th:value="${form.email}">') == ["form", "form.email"]

    def test_th_text_with_literal_text(self):
        assert paths("<p th:text=\"'Total: ' + ${order.total}\">") == ["order", "order.total"]

    def test_unbalanced_quote_does_not_hide_later_attribute(self):
        text = "<p th:text=\"${it's}\" th:value=\"${form.name}\" title='}'>"
        matches = find_all_variable_matches(text)
        assert ("${form.name}", "form") in matches
        assert ("${form.name}", "form.name") in matches


class TestIteratorVariables:

    def test_simple_iteration(self):
        info = find_iterator_variables('<li th:each="item : ${items}">')
        assert "item" in info.iterator_vars
        assert info.parent_vars["item"] == "items"
        assert info.stat_vars == {}

    def test_status_variable(self):
        info = find_iterator_variables('<tr th:each="user, stat : ${users}">')
        assert info.iterator_vars == {"user", "stat"}
        assert info.parent_vars == {"user": "users"}
        assert info.stat_vars == {"stat": "users"}

    def test_single_quotes_and_nested_collection(self):
        info = find_iterator_variables("<tr th:each='row : ${table.rows}'>")
        assert info.parent_vars == {"row": "table.rows"}

    def test_multiline(self):
        text = '<li th:each="item\n    : ${cart.items}">'
        assert find_iterator_variables(text).parent_vars == {"item": "cart.items"}

    def test_iteration_matches_are_reported_literally(self):
        text = '<li th:each="item : ${items}" th:text="${item.name}">'
        assert paths(text) == ["items", "item", "item.name"]

    def test_malformed_binding(self):
        info = find_iterator_variables('<li th:each="item in ${items}">')
        assert info.iterator_vars == set()


class TestVariableReferences:

    def test_start_index_of_expression(self):
        text = '<p th:text="${user.name}">'
        references = find_variable_references(text)
        assert [ref.variable for ref in references] == ["user", "user.name"]
        assert all(ref.start_index == text.index("${") for ref in references)
        assert not any(ref.is_iterator_var for ref in references)

    def test_iterator_flag(self):
        text = '<li th:each="item : ${items}"><span th:text="${item.name}"></span></li>'
        flags = {ref.variable: ref.is_iterator_var for ref in find_variable_references(text)}
        assert flags == {"items": False, "item": True, "item.name": True}

    def test_offset_skips_escaped_copy(self):
        text = '<p th:text="\\${a}">${a}</p>'
        references = find_variable_references(text)
        assert [(ref.variable, ref.start_index) for ref in references] == [("a", text.index("${a}<"))]


class TestDeterminism:

    def test_repeated_calls_are_identical(self):
        text = (
            '<div th:if="${user.active}" th:text="#{greeting(${user.name})}">'
            '<a th:href="@{/u/{id}(id=${user.id})}">x</a></div>'
        )
        assert find_all_variable_matches(text) == find_all_variable_matches(text)
        assert find_iterator_variables(text) == find_iterator_variables(text)

    def test_concurrent_calls_match_serial_results(self):
        texts = [
            f'<li th:each="row : ${{table{n}.rows}}" th:text="${{row.cell{n} ?: #strings.trim(fallback)}}">'
            f'<a th:href="@{{/rows/{{id}}(id=${{row.id}})}}">[[${{total{n}}}]]</a></li>'
            for n in range(40)
        ]
        serial = [(find_all_variable_matches(text), find_iterator_variables(text)) for text in texts]

        def analyze(text):
            return find_all_variable_matches(text), find_iterator_variables(text)

        with ThreadPoolExecutor(max_workers=8) as pool:
            assert list(pool.map(analyze, texts)) == serial
