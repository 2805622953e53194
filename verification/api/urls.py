from django.urls import path
from verification.api.views import (
    AutoApproveEligibleView,
    ChangeRequestHistoryView,
    ChangeRequestSubmissionView,
    FeedbackSubmissionView,
    NotificationListView,
    NotificationReadView,
    PaymentSubmissionView,
    ProfileSubmissionView,
    TaskCountsView,
    TaskDecisionView,
    TaskListView,
)
from verification.workflow import Decision

urlpatterns = [
    # Administrator queue
    path("tasks/", TaskListView.as_view(), name="task-list"),
    path("tasks/counts/", TaskCountsView.as_view(), name="task-counts"),
    path(
        "tasks/<str:kind>/<int:source_id>/approve/",
        TaskDecisionView.as_view(decision=Decision.APPROVE),
        name="task-approve",
    ),
    path(
        "tasks/<str:kind>/<int:source_id>/reject/",
        TaskDecisionView.as_view(decision=Decision.REJECT),
        name="task-reject",
    ),
    path(
        "tasks/<str:kind>/<int:source_id>/process/",
        TaskDecisionView.as_view(decision=Decision.PROCESS),
        name="task-process",
    ),
    path(
        "accounts/auto-approve-eligible/",
        AutoApproveEligibleView.as_view(),
        name="auto-approve-eligible",
    ),
    path(
        "change-requests/history/",
        ChangeRequestHistoryView.as_view(),
        name="change-request-history",
    ),
    # Resident submissions
    path(
        "accounts/<int:account_id>/profile/",
        ProfileSubmissionView.as_view(),
        name="profile-submit",
    ),
    path(
        "accounts/<int:account_id>/change-requests/",
        ChangeRequestSubmissionView.as_view(),
        name="change-request-submit",
    ),
    path(
        "accounts/<int:account_id>/payments/",
        PaymentSubmissionView.as_view(),
        name="payment-submit",
    ),
    path(
        "accounts/<int:account_id>/feedback/",
        FeedbackSubmissionView.as_view(),
        name="feedback-submit",
    ),
    path(
        "accounts/<int:account_id>/notifications/",
        NotificationListView.as_view(),
        name="notification-list",
    ),
    path(
        "accounts/<int:account_id>/notifications/<int:notification_id>/read/",
        NotificationReadView.as_view(),
        name="notification-read",
    ),
]
