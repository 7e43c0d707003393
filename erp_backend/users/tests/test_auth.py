# users/tests/test_auth.py

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from activity.models import ActivityLog

User = get_user_model()


class AuthFlowTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser(
            email="admin@erp.test", password="AdminPass123!"
        )
        self.clerk = User.objects.create_user(
            email="clerk@erp.test", password="ClerkPass123!", role=User.ROLE_SALES
        )

    def test_login_returns_jwt_pair(self):
        res = self.client.post(
            "/api/auth/login/",
            {"email": "clerk@erp.test", "password": "ClerkPass123!"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertIn("access", res.data)
        self.assertIn("refresh", res.data)
        self.assertEqual(res.data["user"]["role"], "sales")

    def test_login_rejects_bad_password(self):
        res = self.client.post(
            "/api/auth/login/",
            {"email": "clerk@erp.test", "password": "nope"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me_requires_authentication(self):
        res = self.client.get("/api/auth/me/")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_returns_current_actor(self):
        self.client.force_authenticate(self.clerk)
        res = self.client.get("/api/auth/me/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["email"], "clerk@erp.test")

    def test_register_is_admin_only(self):
        self.client.force_authenticate(self.clerk)
        payload = {"email": "new@erp.test", "password": "NewPass123!xyz", "role": "accountant"}
        res = self.client.post("/api/auth/register/", payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        res = self.client.post("/api/auth/register/", payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.filter(email="new@erp.test", role="accountant").exists())

    def test_superuser_defaults_to_admin_role(self):
        self.assertEqual(self.admin.role, User.ROLE_ADMIN)
        self.assertTrue(self.admin.is_staff)

    def test_me_reports_role_capabilities(self):
        self.client.force_authenticate(self.clerk)
        res = self.client.get("/api/auth/me/")
        self.assertEqual(
            res.data["capabilities"],
            {
                "run_repair": False,
                "delete_invoices": False,
                "delete_payments": False,
                "delete_production": False,
                "delete_stock_documents": False,
            },
        )

    def test_login_is_audited(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.client.post(
                "/api/auth/login/",
                {"email": "clerk@erp.test", "password": "ClerkPass123!"},
                format="json",
            )
        self.assertTrue(ActivityLog.objects.filter(action="LOGIN", entity_id="clerk@erp.test").exists())
