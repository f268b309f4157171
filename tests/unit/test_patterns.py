from __future__ import annotations

from leadscrub.services.patterns import generate_email_patterns


def test_pattern_order_is_fixed():
    assert generate_email_patterns("Jane", "Doe", "acme.io") == [
        "jane@acme.io",
        "jane.doe@acme.io",
        "jdoe@acme.io",
        "janed@acme.io",
        "jane_doe@acme.io",
        "janedoe@acme.io",
        "doejane@acme.io",
        "doe.jane@acme.io",
        "doej@acme.io",
        "j.doe@acme.io",
        "jane-doe@acme.io",
        "doe@acme.io",
    ]


def test_inputs_are_trimmed_and_lowercased():
    assert generate_email_patterns(" JANE ", "Doe", "ACME.io ")[0] == "jane@acme.io"


def test_blank_input_gives_no_candidates():
    assert generate_email_patterns("", "Doe", "acme.io") == []
    assert generate_email_patterns("Jane", " ", "acme.io") == []
    assert generate_email_patterns("Jane", "Doe", "") == []
