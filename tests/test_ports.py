import pytest

from compose2nomad.libs.functions.ports import (
    build_network,
    consolidate_ports,
    parse_port_number,
    parse_port_spec,
    port_label,
    port_spec_from_mapping,
    sanitize_comment_to_label,
    well_known_port_label,
)
from compose2nomad.libs.schemas.nomad_job import Port


def test_parse_port_spec_splits_host_container_and_comment():
    info = parse_port_spec("8080:80/tcp # Web UI")

    assert info is not None
    assert info.host_port == "8080"
    assert info.container_port == "80"
    assert info.protocol_stripped_port == "80"
    assert info.comment == "Web UI"


def test_parse_port_spec_without_host_port():
    info = parse_port_spec("53/udp")

    assert info is not None
    assert info.host_port == ""
    assert info.container_port == "53"
    assert info.comment == ""


def test_parse_port_spec_rejects_missing_container_port():
    assert parse_port_spec("8080:") is None
    assert parse_port_spec("") is None


def test_consolidate_ports_keeps_first_entry_and_reports_duplicates():
    infos = [parse_port_spec(raw) for raw in ("8080:80", "8080:80/tcp", "9090:80", "443")]
    notes: list[str] = []

    consolidated = consolidate_ports(infos, notes)

    assert [info.raw for info in consolidated] == ["8080:80", "443"]
    assert len(notes) == 2
    assert "8080:80/tcp" in notes[0]
    assert "9090:80" in notes[1]


@pytest.mark.parametrize(
    ("comment", "expected"),
    [
        ("My Custom Label!", "my_custom_label"),
        ("  admin-api  ", "admin_api"),
        ("a - b", "a_b"),
        ("__grpc__", "grpc"),
        ("!!!", ""),
        ("", ""),
    ],
)
def test_sanitize_comment_to_label(comment, expected):
    assert sanitize_comment_to_label(comment) == expected


def test_well_known_port_label():
    assert well_known_port_label("80") == "http"
    assert well_known_port_label("5432") == "postgresql"
    assert well_known_port_label("6379") is None


def test_port_label_precedence():
    assert port_label(parse_port_spec("80")) == "http"
    assert port_label(parse_port_spec("6379")) == "port_6379"
    assert port_label(parse_port_spec("80 # My Custom Label!")) == "my_custom_label"
    assert port_label(parse_port_spec("443 # ???")) == "https"


def test_parse_port_number():
    assert parse_port_number(" 8080 ") == 8080
    with pytest.raises(ValueError, match="empty"):
        parse_port_number("")
    with pytest.raises(ValueError, match="could not parse"):
        parse_port_number("http")


def test_build_network_maps_static_and_to():
    mapping = build_network(["8080:80", "443:443", "3000"])

    assert mapping.labels == ["http", "https", "port_3000"]
    assert mapping.network is not None
    assert mapping.network.ports == [
        Port(label="http", static=8080, to=80),
        Port(label="https", static=443),
        Port(label="port_3000", to=3000),
    ]
    assert mapping.notes == []


def test_build_network_consolidates_duplicate_container_ports():
    mapping = build_network(["8080:80", "8080:80/tcp", "9090:80"])

    assert mapping.network.ports == [Port(label="http", static=8080, to=80)]
    assert mapping.labels == ["http"]


def test_build_network_skips_unparsable_ports_with_a_note():
    mapping = build_network(["abc:80", "8080:web", "6379"])

    assert mapping.labels == ["port_6379"]
    assert mapping.network.ports == [Port(label="port_6379", to=6379)]
    assert mapping.notes[0].startswith("Error parsing host port 'abc' for label 'http'")
    assert mapping.notes[1].startswith("Error parsing container port 'web' for label 'port_web'")


def test_build_network_without_ports():
    mapping = build_network([])

    assert mapping.network is None
    assert mapping.labels == []


def test_build_network_notes_invalid_spec():
    mapping = build_network(["9000:"])

    assert mapping.network is None
    assert mapping.notes == ["Skipping invalid port spec: 9000:"]


def test_port_spec_from_mapping():
    assert (
        port_spec_from_mapping(
            {"target": 80, "published": "8080", "protocol": "tcp", "name": "web"}
        )
        == "8080:80/tcp # web"
    )
    assert port_spec_from_mapping({"target": 6379}) == "6379"
    assert port_spec_from_mapping({"published": 8080}) is None


def test_build_network_accepts_long_syntax():
    mapping = build_network(
        [{"target": 80, "published": 8080, "name": "Web UI"}, {"published": 9000}]
    )

    assert mapping.labels == ["web_ui"]
    assert mapping.network.ports == [Port(label="web_ui", static=8080, to=80)]
    assert mapping.notes == [
        "Skipping long syntax port spec without target: {'published': 9000}"
    ]
