"""Tests for the app factory, error handlers and utilities."""

import datetime
import importlib
import os
import unittest
from unittest.mock import patch

from firebase_admin import firestore
from google.api_core.exceptions import ServiceUnavailable
from werkzeug.middleware.proxy_fix import ProxyFix

from volunteerhub import create_app
from volunteerhub.errors import EventFullError, PermissionDeniedError
from volunteerhub.utils import as_datetime, chunked, to_json_safe


class AppFactoryTestCase(unittest.TestCase):
    """Test case for the app factory."""

    def setUp(self):
        self.app = create_app({"TESTING": True, "WTF_CSRF_ENABLED": False})

        @self.app.route("/boom/db")
        def db_failure():
            raise ServiceUnavailable("backend down at 10.0.0.7")

        @self.app.route("/boom/app")
        def app_failure():
            raise PermissionDeniedError("Only group admins can do that.")

        self.client = self.app.test_client()

    def test_404_error_handler(self):
        response = self.client.get("/non_existent_page")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()["code"], "not-found")

    def test_database_errors_are_opaque(self):
        response = self.client.get("/boom/db")

        self.assertEqual(response.status_code, 500)
        body = response.get_json()
        self.assertEqual(body["code"], "internal")
        self.assertNotIn("10.0.0.7", body["message"])

    def test_app_errors_render_code_and_message(self):
        response = self.client.get("/boom/app")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(
            response.get_json(),
            {
                "status": "error",
                "code": "permission-denied",
                "message": "Only group admins can do that.",
            },
        )

    def test_version(self):
        with patch.dict(os.environ, {"APP_VERSION": "1.2.3"}):
            app = create_app({"TESTING": True})

        response = app.test_client().get("/version")

        self.assertEqual(response.get_json(), {"version": "1.2.3"})

    def test_proxy_fix_is_applied(self):
        self.assertIsInstance(self.app.wsgi_app, ProxyFix)

    def test_firebase_not_initialized_when_testing(self):
        with patch("firebase_admin.initialize_app") as mock_init:
            create_app({"TESTING": True})
        mock_init.assert_not_called()

    @patch("firebase_admin.initialize_app")
    @patch("firebase_admin.credentials.ApplicationDefault")
    def test_health_check(self, mock_default_credentials, mock_init):
        env = {k: v for k, v in os.environ.items() if k != "FIREBASE_CREDENTIALS_JSON"}
        with patch.dict(os.environ, env, clear=True), patch(
            "firebase_admin._apps", {}
        ):
            app_module = importlib.import_module("app")

        response = app_module.app.test_client().get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, b"OK")

    def test_callable_status_names(self):
        self.assertEqual(PermissionDeniedError().callable_status, "PERMISSION_DENIED")
        self.assertEqual(EventFullError().status_code, 409)


class UtilsTestCase(unittest.TestCase):
    def test_to_json_safe(self):
        when = datetime.datetime(2030, 1, 1, 9, 0, tzinfo=datetime.timezone.utc)

        result = to_json_safe(
            {"createdAt": firestore.SERVER_TIMESTAMP, "dates": [when], "n": 3}
        )

        self.assertEqual(
            result,
            {"createdAt": None, "dates": ["2030-01-01T09:00:00+00:00"], "n": 3},
        )

    def test_chunked(self):
        self.assertEqual(
            list(chunked(list(range(7)), 3)), [[0, 1, 2], [3, 4, 5], [6]]
        )

    def test_as_datetime(self):
        naive = datetime.datetime(2030, 1, 1, 9, 0)

        self.assertEqual(as_datetime(naive).tzinfo, datetime.timezone.utc)
        self.assertEqual(
            as_datetime(datetime.date(2030, 1, 1)),
            datetime.datetime(2030, 1, 1, tzinfo=datetime.timezone.utc),
        )
        self.assertIsNone(as_datetime("tomorrow"))


if __name__ == "__main__":
    unittest.main()
