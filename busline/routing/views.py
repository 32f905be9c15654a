from typing import Any

from django.http import HttpRequest
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Route
from .serializers import RouteSerializer
import logging

logger = logging.getLogger(__name__)


class RouteListView(APIView):
    def get(self, request: HttpRequest, *args: Any, **kwargs: Any) -> Response:
        routes = Route.objects.order_by("id")
        return Response(RouteSerializer(routes, many=True).data)

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> Response:
        serializer = RouteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        route = serializer.save()
        logger.info("Route %s: registered %r with %s points", route.id, route.route_name, len(route.points))
        return Response(RouteSerializer(route).data, status=status.HTTP_201_CREATED)


class RouteDetailView(APIView):
    def get(self, request: HttpRequest, pk: int, *args: Any, **kwargs: Any) -> Response:
        route = Route.objects.filter(pk=pk).first()
        if route is None:
            return Response({"detail": "Route not found"}, status=status.HTTP_404_NOT_FOUND)
        return Response(RouteSerializer(route).data)
