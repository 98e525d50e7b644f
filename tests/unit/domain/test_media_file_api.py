"""Unit tests for ProductMediaFileApi."""
import io
import json
from unittest.mock import Mock

import pytest

from domain.media_file_api import (
    MEDIA_FILE_DOWNLOAD_URI,
    MEDIA_FILE_URI,
    MEDIA_FILES_URI,
    ProductMediaFileApi,
    extract_code_from_creation_response,
)
from domain.models import HttpResponse, MediaFileSource
from domain.pagination import Page, ResourceCursor
from ports.cursor_factory import CursorFactory
from ports.media_file_api import (
    FileUnreadableError,
    MalformedCreationResponseError,
    MissingLocationHeaderError,
    UnrecognizedLocationFormatError,
)
from ports.page_factory import PageFactory
from ports.resource_client import NotFoundError, ResourceClient, UnprocessableEntityError


@pytest.fixture
def mock_resource_client():
    """Mock resource transport."""
    return Mock(spec=ResourceClient)


@pytest.fixture
def mock_page_factory():
    """Mock page factory."""
    return Mock(spec=PageFactory)


@pytest.fixture
def mock_cursor_factory():
    """Mock cursor factory."""
    return Mock(spec=CursorFactory)


@pytest.fixture
def api(mock_resource_client, mock_page_factory, mock_cursor_factory):
    """ProductMediaFileApi wired with mocks."""
    return ProductMediaFileApi(
        resource_client=mock_resource_client,
        page_factory=mock_page_factory,
        cursor_factory=mock_cursor_factory,
    )


def created(location=None):
    """Build a 201 creation response, with Location header if given."""
    headers = {"Location": location} if location is not None else {}
    return HttpResponse(status_code=201, headers=headers)


@pytest.mark.unit
class TestEndpoints:
    """The endpoint templates are a contract with the API."""

    def test_uri_templates(self):
        assert MEDIA_FILES_URI == "api/rest/v1/media-files"
        assert MEDIA_FILE_URI == "api/rest/v1/media-files/{code}"
        assert MEDIA_FILE_DOWNLOAD_URI == "api/rest/v1/media-files/{code}/download"


@pytest.mark.unit
class TestGet:
    """Tests for fetching a single media file."""

    def test_get_returns_representation_unchanged(self, api, mock_resource_client):
        representation = {"code": "8/ecaf.jpg", "original_filename": "ecaf.jpg", "size": 123}
        mock_resource_client.get_resource.return_value = representation

        result = api.get("8/ecaf.jpg")

        assert result is representation
        mock_resource_client.get_resource.assert_called_once_with(
            "api/rest/v1/media-files/{code}", {"code": "8/ecaf.jpg"}
        )

    def test_get_propagates_transport_errors(self, api, mock_resource_client):
        mock_resource_client.get_resource.side_effect = NotFoundError("Not found", status_code=404)

        with pytest.raises(NotFoundError) as exc_info:
            api.get("missing.jpg")

        assert exc_info.value.status_code == 404

    def test_get_rejects_empty_code(self, api, mock_resource_client):
        with pytest.raises(ValueError):
            api.get("")

        mock_resource_client.get_resource.assert_not_called()


@pytest.mark.unit
class TestListPerPage:
    """Tests for single-page listing."""

    def test_list_per_page_wraps_raw_data(self, api, mock_resource_client, mock_page_factory):
        raw = {"_links": {}, "_embedded": {"items": [{"code": "a"}]}}
        page = Page(items=({"code": "a"},))
        mock_resource_client.get_resources.return_value = raw
        mock_page_factory.create_page.return_value = page

        result = api.list_per_page(25, True, {"search": {"code": [{"operator": "IN", "value": ["a"]}]}})

        assert result is page
        mock_resource_client.get_resources.assert_called_once_with(
            "api/rest/v1/media-files",
            {},
            25,
            True,
            {"search": {"code": [{"operator": "IN", "value": ["a"]}]}},
        )
        mock_page_factory.create_page.assert_called_once_with(raw)
        assert mock_page_factory.create_page.call_args.args[0] is raw

    def test_list_per_page_does_not_mutate_raw_data(self, api, mock_resource_client, mock_page_factory):
        raw = {"_embedded": {"items": [{"code": "a"}, {"code": "b"}]}, "items_count": 2}
        snapshot = json.loads(json.dumps(raw))
        mock_resource_client.get_resources.return_value = raw

        api.list_per_page()

        assert raw == snapshot

    def test_list_per_page_defaults(self, api, mock_resource_client):
        api.list_per_page()
        api.list_per_page(10, False, {})

        first, second = mock_resource_client.get_resources.call_args_list
        assert first == second
        assert first.args == ("api/rest/v1/media-files", {}, 10, False, {})

    def test_list_per_page_rejects_non_positive_limit(self, api, mock_resource_client):
        for limit in (0, -5):
            with pytest.raises(ValueError):
                api.list_per_page(limit)

        mock_resource_client.get_resources.assert_not_called()


@pytest.mark.unit
class TestAll:
    """Tests for full traversal."""

    def test_all_fetches_first_page_without_count(
        self, api, mock_resource_client, mock_page_factory, mock_cursor_factory
    ):
        first_page = Page(items=({"code": "a"},))
        cursor = Mock(spec=ResourceCursor)
        mock_page_factory.create_page.return_value = first_page
        mock_cursor_factory.create_cursor.return_value = cursor

        result = api.all(50, {"search": {"extension": "jpg"}})

        assert result is cursor
        mock_resource_client.get_resources.assert_called_once_with(
            "api/rest/v1/media-files", {}, 50, False, {"search": {"extension": "jpg"}}
        )
        mock_cursor_factory.create_cursor.assert_called_once_with(50, first_page)

    def test_all_never_requests_count(self, api, mock_resource_client):
        """with_count is fixed to False for traversal, whatever the page size."""
        api.all()
        api.all(3)

        for call in mock_resource_client.get_resources.call_args_list:
            assert call.args[3] is False

    def test_all_defaults(self, api, mock_resource_client, mock_cursor_factory):
        api.all()

        mock_resource_client.get_resources.assert_called_once_with(
            "api/rest/v1/media-files", {}, 10, False, {}
        )
        assert mock_cursor_factory.create_cursor.call_args.args[0] == 10


@pytest.mark.unit
class TestCreate:
    """Tests for multipart creation."""

    def test_create_from_stream_returns_code(self, api, mock_resource_client):
        mock_resource_client.create_multipart_resource.return_value = created(
            "https://host/api/rest/v1/media-files/8/ecaf.jpg"
        )
        stream = io.BytesIO(b"\x89PNG fake image")
        product = {"identifier": "sku-1", "attribute": "picture", "scope": None, "locale": None}

        code = api.create(stream, product)

        assert code == "8/ecaf.jpg"
        uri, uri_parameters, parts = mock_resource_client.create_multipart_resource.call_args.args
        assert uri == "api/rest/v1/media-files"
        assert uri_parameters == {}
        assert [part.name for part in parts] == ["product", "file"]
        assert json.loads(parts[0].contents) == product
        assert parts[1].contents is stream
        assert not stream.closed, "Caller stream must be left open"

    def test_create_from_path_sends_file_and_closes_it(self, api, mock_resource_client, tmp_path):
        media = tmp_path / "shoe.jpg"
        media.write_bytes(b"jpeg bytes")
        sent = {}

        def capture(uri, uri_parameters, parts):
            sent["stream"] = parts[1].contents
            sent["filename"] = parts[1].filename
            sent["content"] = parts[1].contents.read()
            return created("http://pim/api/rest/v1/media-files/a/b/c/abc_shoe.jpg")

        mock_resource_client.create_multipart_resource.side_effect = capture

        code = api.create(str(media), {"identifier": "sku-1"})

        assert code == "a/b/c/abc_shoe.jpg"
        assert sent["content"] == b"jpeg bytes"
        assert sent["filename"] == "shoe.jpg"
        assert sent["stream"].closed

    def test_create_accepts_media_file_source(self, api, mock_resource_client, tmp_path):
        media = tmp_path / "doc.pdf"
        media.write_bytes(b"%PDF")
        mock_resource_client.create_multipart_resource.return_value = created(
            "http://pim/api/rest/v1/media-files/d/doc.pdf"
        )

        assert api.create(MediaFileSource.from_path(media), {}) == "d/doc.pdf"

    def test_create_with_unreadable_path_makes_no_request(self, api, mock_resource_client):
        with pytest.raises(FileUnreadableError) as exc_info:
            api.create("/nonexistent/file.jpg", {"identifier": "sku-1"})

        error = exc_info.value
        assert error.code == "FILE_UNREADABLE"
        assert "/nonexistent/file.jpg" in error.message
        assert error.path == "/nonexistent/file.jpg"
        mock_resource_client.create_multipart_resource.assert_not_called()

    def test_create_with_directory_path_is_unreadable(self, api, mock_resource_client, tmp_path):
        with pytest.raises(FileUnreadableError):
            api.create(str(tmp_path), {})

        mock_resource_client.create_multipart_resource.assert_not_called()

    def test_create_without_location_header(self, api, mock_resource_client):
        mock_resource_client.create_multipart_resource.return_value = created()

        with pytest.raises(MissingLocationHeaderError) as exc_info:
            api.create(io.BytesIO(b"data"), {})

        assert exc_info.value.code == "MISSING_LOCATION_HEADER"

    def test_create_with_foreign_location_header(self, api, mock_resource_client):
        mock_resource_client.create_multipart_resource.return_value = created(
            "https://host/api/rest/v1/other-resource/42"
        )

        with pytest.raises(UnrecognizedLocationFormatError) as exc_info:
            api.create(io.BytesIO(b"data"), {})

        assert exc_info.value.code == "UNRECOGNIZED_LOCATION_FORMAT"
        assert exc_info.value.location == "https://host/api/rest/v1/other-resource/42"

    def test_create_propagates_validation_errors(self, api, mock_resource_client):
        mock_resource_client.create_multipart_resource.side_effect = UnprocessableEntityError(
            "Validation failed.",
            status_code=422,
            response_body={"errors": [{"property": "attribute", "message": "Unknown attribute"}]},
        )

        with pytest.raises(UnprocessableEntityError) as exc_info:
            api.create(io.BytesIO(b"data"), {"identifier": "sku-1", "attribute": "nope"})

        assert exc_info.value.errors[0]["property"] == "attribute"


@pytest.mark.unit
class TestDownload:
    """Tests for streamed download."""

    def test_download_returns_transport_stream(self, api, mock_resource_client):
        stream = io.BytesIO(b"\x00\x01binary\xff")
        mock_resource_client.get_streamed_resource.return_value = stream

        result = api.download("8/ecaf.jpg")

        assert result is stream
        assert result.read() == b"\x00\x01binary\xff"
        mock_resource_client.get_streamed_resource.assert_called_once_with(
            "api/rest/v1/media-files/{code}/download", {"code": "8/ecaf.jpg"}
        )

    def test_download_rejects_empty_code(self, api, mock_resource_client):
        with pytest.raises(ValueError):
            api.download("")

        mock_resource_client.get_streamed_resource.assert_not_called()


@pytest.mark.unit
class TestExtractCode:
    """Tests for extracting the code from a creation response."""

    @pytest.mark.parametrize(
        "location, expected",
        [
            ("https://host/api/rest/v1/media-files/8/ecaf.jpg", "8/ecaf.jpg"),
            ("http://localhost:8080/api/rest/v1/media-files/a/b/c/d/abcd_my%20file.png", "a/b/c/d/abcd_my%20file.png"),
            ("/api/rest/v1/media-files/plain.txt", "plain.txt"),
        ],
    )
    def test_extracts_code_verbatim(self, location, expected):
        assert extract_code_from_creation_response(created(location)) == expected

    def test_header_lookup_is_case_insensitive(self):
        response = HttpResponse(
            status_code=201,
            headers={"location": "https://host/api/rest/v1/media-files/x.jpg"},
        )

        assert extract_code_from_creation_response(response) == "x.jpg"

    def test_empty_location_is_missing(self):
        with pytest.raises(MissingLocationHeaderError):
            extract_code_from_creation_response(created(""))

    def test_errors_share_malformed_response_base(self):
        with pytest.raises(MalformedCreationResponseError):
            extract_code_from_creation_response(created())
        with pytest.raises(MalformedCreationResponseError):
            extract_code_from_creation_response(created("https://host/api/rest/v1/products/sku-1"))
