from rest_framework.views import APIView
from rest_framework.response import Response


class ApiHomeView(APIView):
    authentication_classes = []
    permission_classes = []

    def get(self, request):
        return Response(
            {
                "message": "Welcome to the EV Dealer Management API",
                "endpoints": {
                    "admin": "/admin/",
                    "token_obtain": "/api/token/",
                    "token_refresh": "/api/token/refresh/",
                    "schema": "/api/schema/",
                    "swagger": "/api/schema/swagger-ui/",
                    "redoc": "/api/schema/redoc/",
                    "health": "/dms/health/",
                    "bookings": "/dms/bookings/",
                    "job_cards": "/dms/job-cards/",
                    "warranty_claims": "/dms/warranty-claims/",
                    "spares": "/dms/spares/",
                    "stock_alerts": "/dms/stock-alerts/",
                },
            }
        )
