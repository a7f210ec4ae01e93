from aria_audit.config import AuditSettings
from aria_audit.dom import Document
from aria_audit.models import STATUS_FAIL, STATUS_PASS_DECORATIVE, STATUS_PASS_MEANINGFUL
from aria_audit.rules import check_icon_names, check_nested_interactive, check_prohibited_naming
from aria_audit.rules.icon_name import TITLE_IS_NOT_A_NAME


def _doc(body):
    return Document(f"<html><body>{body}</body></html>")


# --- Nested interactive ---

def test_button_inside_link_is_one_finding():
    doc = _doc('<a href="/x"><button>Go</button></a>')
    findings = check_nested_interactive(doc)
    assert len(findings) == 1
    f = findings[0]
    assert f.tags == ["button", "a"]
    assert f.element is doc.soup.find("button")
    assert f.parent is doc.soup.find("a")
    assert f.message == "Nested Interactive Controls: <button> inside <a>"


def test_label_wrapping_input_is_allowed():
    doc = _doc('<button><label>Email <input type="email"></label></button>')
    pairs = [(f.tags[0], f.tags[1]) for f in check_nested_interactive(doc)]
    assert ("input", "label") not in pairs
    # The walk continues past the label to the button
    assert ("input", "button") in pairs
    assert ("label", "button") in pairs


def test_label_with_button_role_wrapping_input():
    doc = _doc('<label role="button"><input type="checkbox"></label>')
    assert check_nested_interactive(doc) == []


def test_only_nearest_container_is_reported():
    doc = _doc('<div role="link" tabindex="0"><a href="#"><span role="switch"></span></a></div>')
    findings = check_nested_interactive(doc)
    assert [(f.tags[0], f.tags[1]) for f in findings] == [("a", "div"), ("span", "a")]
    assert findings[0].message == 'Nested Interactive Controls: <a> inside <div role="link">'


def test_hidden_inner_control_is_skipped():
    doc = _doc('<a href="#"><button style="display:none">x</button><input type="hidden"></a>')
    assert check_nested_interactive(doc) == []


def test_visibility_hidden_inner_control_is_skipped():
    doc = _doc('<a href="#"><button style="visibility: hidden">x</button></a>')
    assert check_nested_interactive(doc) == []

    doc = _doc('<a href="#" style="visibility:hidden"><button style="visibility:visible">x</button></a>')
    assert [(f.tags[0], f.tags[1]) for f in check_nested_interactive(doc)] == [("button", "a")]


def test_deeply_nested_documents_do_not_raise():
    depth = 1200
    doc = _doc("<div>" * depth + '<a href="#"><button>x</button></a>' + "</div>" * depth)
    findings = check_nested_interactive(doc)
    assert [(f.tags[0], f.tags[1]) for f in findings] == [("button", "a")]

    doc = _doc("<svg>" + "<g>" * 700 + "<path></path>" + "</g>" * 700 + "</svg>")
    icons = check_icon_names(doc)
    assert len(icons) == 1
    assert icons[0].message.startswith('Visible icon missing role="img" AND accessible name.')

    doc = _doc('<span id="l">' + "<em>" * depth + "Label" + "</em>" * depth + '</span><p aria-labelledby="l">x</p>')
    assert check_prohibited_naming(doc)[0].details["value"] == "Label"


def test_walk_stops_at_body():
    doc = Document('<html role="button"><body role="link"><button>x</button></body></html>')
    assert check_nested_interactive(doc) == []


# --- Prohibited naming ---

def test_div_label_without_interactive_child():
    findings = check_prohibited_naming(_doc('<div aria-label="Close">x</div>'))
    assert len(findings) == 1
    f = findings[0]
    assert f.message == "Generic <div> prohibits naming attributes"
    assert f.suggestion == 'Remove attribute (or add role="group" or role="region" if container)'
    assert f.details == {"attribute": "aria-label", "value": "Close"}


def test_div_label_with_button_descendant():
    findings = check_prohibited_naming(_doc('<div aria-label="Close"><span><button>x</button></span></div>'))
    assert findings[0].suggestion == "Move aria-label to <button> child"


def test_anchor_without_href_is_not_a_target():
    findings = check_prohibited_naming(_doc('<span aria-labelledby="t"><a>x</a><a href="#">y</a></span>'))
    assert findings[0].suggestion == "Move aria-labelledby to <a> child"
    findings = check_prohibited_naming(_doc('<span aria-labelledby="t"><a>x</a></span>'))
    assert findings[0].suggestion.startswith("Remove attribute")


def test_label_suggestion_and_labelledby_value():
    doc = _doc('<h2 id="h">Shipping <em>address</em></h2><label aria-labelledby="h other">Street</label>')
    f = check_prohibited_naming(doc)[0]
    assert f.tags == ["label"]
    assert f.suggestion == "Remove (use visible text inside label)"
    assert f.details == {"attribute": "aria-labelledby", "value": "Shipping address"}


def test_unresolved_reference_placeholder():
    f = check_prohibited_naming(_doc('<p aria-labelledby="ghost">x</p>'))[0]
    assert f.details["value"] == "[ID ref]"


def test_labelledby_value_is_trimmed():
    doc = _doc('<span id="r">\n   Billing details  \n</span><div aria-labelledby="r">x</div>')
    assert check_prohibited_naming(doc)[0].details["value"] == "Billing details"


def test_label_takes_precedence_in_value():
    doc = _doc('<span id="r">Ref</span><b aria-label="Bold" aria-labelledby="r">x</b>')
    findings = check_prohibited_naming(doc)
    assert len(findings) == 1
    assert findings[0].details == {"attribute": "aria-label", "value": "Bold"}


def test_allowed_roles_are_not_flagged():
    body = '<div role="region" aria-label="News"></div><nav aria-label="Main"></nav><button aria-label="Go"></button>'
    assert check_prohibited_naming(_doc(body)) == []


def test_findings_in_document_order():
    doc = _doc('<span aria-label="a"></span><div><strong aria-label="b"></strong></div><code role="code" aria-label="c"></code>')
    assert [f.details["value"] for f in check_prohibited_naming(doc)] == ["a", "b", "c"]


# --- Icons ---

def test_aria_hidden_icons_are_decorative():
    doc = _doc(
        '<svg aria-hidden="true" role="img"></svg>'
        '<div aria-hidden="true"><i class="fa fa-star"></i><span role="img" aria-label="x"></span></div>'
    )
    findings = check_icon_names(doc)
    assert len(findings) == 3
    assert all(f.status == STATUS_PASS_DECORATIVE for f in findings)
    assert findings[0].details["hidden"] == "true"


def test_role_img_with_name_is_meaningful():
    doc = _doc(
        '<svg role="img" aria-label="Logo"></svg>'
        '<span id="l">Rating</span><div role="img" aria-labelledby="l"></div>'
        '<svg role="img"><title>Chart</title></svg>'
    )
    findings = check_icon_names(doc)
    assert [f.status for f in findings] == [STATUS_PASS_MEANINGFUL] * 3
    assert findings[0].details == {"type": "SVG", "hidden": "false", "name": "Logo"}


def test_title_attribute_message():
    findings = check_icon_names(_doc('<i class="fa-search" title="Search"></i>'))
    assert len(findings) == 1
    f = findings[0]
    assert f.status == STATUS_FAIL
    assert "title" in f.message
    assert "not an accessible name" in f.message
    assert TITLE_IS_NOT_A_NAME in f.message


def test_title_attribute_with_role_img():
    f = check_icon_names(_doc('<svg role="img" title="Search"></svg>'))[0]
    assert f.message.startswith('Icon uses title="..." but missing aria-label.')
    assert f.suggestion == 'Use aria-label="..." to provide a valid accessible name.'


def test_missing_role_only_and_missing_name_only():
    findings = check_icon_names(_doc('<svg aria-label="Home"></svg><span class="material-icons" role="img"></span>'))
    assert findings[0].message == 'Visible icon missing role="img".'
    assert findings[1].message == "Visible icon missing accessible name."


def test_text_threshold_excludes_real_text():
    body = "<i>emphasis</i><i>ok</i><span class=\"icon\">Settings</span><svg>long text inside</svg>"
    findings = check_icon_names(_doc(body))
    assert [f.tags[0] for f in findings] == ["i", "svg"]

    relaxed = check_icon_names(_doc(body), AuditSettings(icon_text_threshold=20))
    assert [f.tags[0] for f in relaxed] == ["i", "i", "span", "svg"]


def test_span_needs_icon_class():
    body = '<span class="label"></span><span class="Glyphicon glyphicon-ok"></span><span class="x-LD-arrow"></span>'
    assert len(check_icon_names(_doc(body))) == 2
    assert check_icon_names(_doc(body), AuditSettings(icon_class_tokens=["label"]))[0].tags == ["span"]


def test_invisible_icons_are_skipped():
    assert check_icon_names(_doc('<svg style="display:none"></svg><div hidden><i></i></div>')) == []


def test_failures_sorted_first_stable():
    doc = _doc(
        '<svg id="p1" role="img" aria-label="a"></svg>'
        '<svg id="f1"></svg>'
        '<i id="p2" aria-hidden="true"></i>'
        '<i id="f2"></i>'
    )
    ids = [f.element["id"] for f in check_icon_names(doc)]
    assert ids == ["f1", "f2", "p1", "p2"]


# --- Rules together ---

def test_rules_do_not_interfere():
    doc = _doc('<a href="#"><span class="icon-chevron"></span><button>Expand</button></a>')

    nested = check_nested_interactive(doc)
    assert len(nested) == 1
    assert (nested[0].tags[0], nested[0].tags[1]) == ("button", "a")

    icons = check_icon_names(doc)
    assert len(icons) == 1
    assert icons[0].tags == ["span"]
    assert icons[0].status == STATUS_FAIL
    assert icons[0].message.startswith('Visible icon missing role="img" AND accessible name.')

    assert check_prohibited_naming(doc) == []
