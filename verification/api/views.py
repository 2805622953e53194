from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from verification.api.permissions import IsAdministrator, actor_role
from verification.api.serializers import (
    AccountSerializer,
    ChangeRequestHistoryQuerySerializer,
    ChangeRequestSerializer,
    ChangeRequestSubmissionSerializer,
    DecisionSerializer,
    FeedbackItemSerializer,
    FeedbackSubmissionSerializer,
    NotificationSerializer,
    PaymentRecordSerializer,
    PaymentSubmissionSerializer,
    PendingTaskSerializer,
    ProfileSubmissionSerializer,
    TaskQuerySerializer,
)
from verification.exceptions import TransitionError
from verification.services.auto_approval import AutoApprovalService
from verification.services.submission_service import SubmissionService
from verification.services.task_aggregator import TaskAggregator
from verification.services.transition_engine import TransitionEngine
from verification.workflow import TaskKind


def error_response(error: TransitionError) -> Response:
    return Response(error.to_dict(), status=error.status_code)


def parse_kind(value: str):
    try:
        return TaskKind.parse(value)
    except ValueError:
        return None


class TaskListView(APIView):
    """
    The administrator verification queue.

    GET /api/v1/tasks/?kind=ALL|ACCOUNT_VERIFICATION|CHANGE_REQUEST|PAYMENT|FEEDBACK
    """

    permission_classes = [IsAdministrator]

    def get(self, request):
        query = TaskQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        tasks = TaskAggregator().list(query.validated_data["kind"])
        return Response(
            {"tasks": PendingTaskSerializer(tasks, many=True).data, "count": len(tasks)},
            status=status.HTTP_200_OK,
        )


class TaskCountsView(APIView):
    """
    Badge counts per task kind.

    GET /api/v1/tasks/counts/
    """

    permission_classes = [IsAdministrator]

    def get(self, request):
        return Response(TaskAggregator().counts(), status=status.HTTP_200_OK)


class TaskDecisionView(APIView):
    """
    Apply an administrator decision to one task.

    POST /api/v1/tasks/{kind}/{id}/approve/   {"note": "..."}   (note optional)
    POST /api/v1/tasks/{kind}/{id}/reject/    {"note": "..."}   (required for accounts)
    POST /api/v1/tasks/FEEDBACK/{id}/process/

    The response carries the server-side outcome; clients reflect it rather than predicting it.
    """

    permission_classes = [IsAdministrator]
    decision = None

    def post(self, request, kind, source_id):
        task_kind = parse_kind(kind)
        if task_kind is None:
            return Response(
                {"message": f"Unknown task kind: {kind}"}, status=status.HTTP_400_BAD_REQUEST
            )

        serializer = DecisionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            outcome = TransitionEngine().apply(
                task_kind,
                source_id,
                self.decision,
                note=serializer.validated_data.get("note"),
                actor_role=actor_role(request),
            )
        except TransitionError as e:
            return error_response(e)

        return Response(outcome.to_dict(), status=status.HTTP_200_OK)


class AutoApproveEligibleView(APIView):
    """
    Batch approval of eligible account verifications.

    GET  /api/v1/accounts/auto-approve-eligible/  -> eligible tasks (preview for the confirm prompt)
    POST /api/v1/accounts/auto-approve-eligible/  -> one result per account, never all-or-nothing
    """

    permission_classes = [IsAdministrator]

    def get(self, request):
        tasks = AutoApprovalService().eligible_tasks()
        return Response(
            {"tasks": PendingTaskSerializer(tasks, many=True).data, "count": len(tasks)},
            status=status.HTTP_200_OK,
        )

    def post(self, request):
        results = AutoApprovalService().run(actor_role=actor_role(request))
        return Response(
            {
                "results": [result.to_dict() for result in results],
                "approved": sum(1 for result in results if result.success),
                "failed": sum(1 for result in results if not result.success),
            },
            status=status.HTTP_200_OK,
        )


class ChangeRequestHistoryView(APIView):
    """
    Audit log of data change requests.

    GET /api/v1/change-requests/history/?status=SUBMITTED|APPROVED|REJECTED&search=name
    """

    permission_classes = [IsAdministrator]

    def get(self, request):
        query = ChangeRequestHistoryQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        requests = SubmissionService().change_request_history(
            status=query.validated_data.get("status"),
            search=query.validated_data.get("search"),
        )
        return Response(
            {"changeRequests": ChangeRequestSerializer(requests, many=True).data},
            status=status.HTTP_200_OK,
        )


class ProfileSubmissionView(APIView):
    """
    Resident completes profile + documents and enters the verification queue.

    POST /api/v1/accounts/{account_id}/profile/
    """

    def post(self, request, account_id):
        serializer = ProfileSubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            account = SubmissionService().submit_profile(account_id, serializer.validated_data)
        except TransitionError as e:
            return error_response(e)

        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)


class ChangeRequestSubmissionView(APIView):
    """
    POST /api/v1/accounts/{account_id}/change-requests/

    Request body:
    {
        "field": "Pekerjaan",
        "newValue": "Wiraswasta",
        "reason": "Pindah kerja"
    }
    """

    def post(self, request, account_id):
        serializer = ChangeRequestSubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            change_request = SubmissionService().submit_change_request(
                account_id, data["field"], data["newValue"], data["reason"]
            )
        except TransitionError as e:
            return error_response(e)

        return Response(ChangeRequestSerializer(change_request).data, status=status.HTTP_201_CREATED)


class PaymentSubmissionView(APIView):
    """POST /api/v1/accounts/{account_id}/payments/"""

    def post(self, request, account_id):
        serializer = PaymentSubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            payment = SubmissionService().submit_payment(
                account_id, data["amount"], data["category"], data["method"], data["proofUrl"]
            )
        except TransitionError as e:
            return error_response(e)

        return Response(PaymentRecordSerializer(payment).data, status=status.HTTP_201_CREATED)


class FeedbackSubmissionView(APIView):
    """POST /api/v1/accounts/{account_id}/feedback/"""

    def post(self, request, account_id):
        serializer = FeedbackSubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            item = SubmissionService().submit_feedback(account_id, serializer.validated_data["text"])
        except TransitionError as e:
            return error_response(e)

        return Response(FeedbackItemSerializer(item).data, status=status.HTTP_201_CREATED)


class NotificationListView(APIView):
    """GET /api/v1/accounts/{account_id}/notifications/?unread=1"""

    def get(self, request, account_id):
        unread_only = request.query_params.get("unread") in ("1", "true", "True")
        try:
            notifications = SubmissionService().notifications_for(account_id, unread_only)
        except TransitionError as e:
            return error_response(e)

        return Response(
            {"notifications": NotificationSerializer(notifications, many=True).data},
            status=status.HTTP_200_OK,
        )


class NotificationReadView(APIView):
    """POST /api/v1/accounts/{account_id}/notifications/{notification_id}/read/"""

    def post(self, request, account_id, notification_id):
        try:
            notification = SubmissionService().mark_notification_read(account_id, notification_id)
        except TransitionError as e:
            return error_response(e)

        return Response(NotificationSerializer(notification).data, status=status.HTTP_200_OK)
