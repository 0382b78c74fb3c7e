from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from core import views as core_views
from courses import views as course_views
from golfers import views as golfer_views
from members import views as member_views
from seasons import views as season_views
from teams import views as team_views
from tiers import views as tier_views
from tournaments import views as tournament_views
from tours import views as tour_views
from transactions import views as transaction_views

admin.site.site_header = "PGC Tour Administration"

# Create a router and register our viewsets with it.
router = DefaultRouter()
router.register(r"audit-logs", core_views.AuditLogViewSet, "audit-logs")
router.register(r"courses", course_views.CourseViewSet, "courses")
router.register(r"golfers", golfer_views.GolferViewSet, "golfers")
router.register(r"members", member_views.MemberViewSet, "members")
router.register(r"seasons", season_views.SeasonViewSet, "seasons")
router.register(r"teams", team_views.TeamViewSet, "teams")
router.register(r"tiers", tier_views.TierViewSet, "tiers")
router.register(r"tour-cards", tour_views.TourCardViewSet, "tour-cards")
router.register(r"tournament-golfers", golfer_views.TournamentGolferViewSet, "tournament-golfers")
router.register(r"tournaments", tournament_views.TournamentViewSet, "tournaments")
router.register(r"tours", tour_views.TourViewSet, "tours")
router.register(r"transactions", transaction_views.TransactionViewSet, "transactions")

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include(router.urls)),
    path("api/celery-check", core_views.ping_celery),
    path("auth/", include("djoser.urls")),
    path("auth/token/login/", core_views.TokenCreateView.as_view(), name="login"),
    path("auth/token/logout/", core_views.TokenDestroyView.as_view(), name="logout"),
]
