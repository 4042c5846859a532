"""
Admin user management.

Admins list, inspect, edit and delete accounts of every role, reset
passwords and read account statistics.  They have no access to medical
records.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from portal.permissions import IsAdmin
from portal.serializers.users import AdminPasswordSerializer, AdminUserUpdateSerializer, UserListQuerySerializer
from portal.services import accounts
from portal.services.access import Actor
from portal.services.accounts import serialize_user


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def list_users(request):
    q = UserListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    users = accounts.list_users(q.validated_data.get('role'), q.validated_data.get('search'))
    return Response({'ok': True, 'users': [serialize_user(u) for u in users]})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdmin])
def user_detail(request, user_id: int):
    if request.method == 'GET':
        return Response({'ok': True, 'user': serialize_user(accounts.get_user(user_id))})
    if request.method == 'DELETE':
        accounts.admin_delete_user(Actor.from_user(request.user), user_id)
        return Response({'ok': True, 'message': 'User deleted successfully'})
    s = AdminUserUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = accounts.admin_update_user(user_id, s.validated_data)
    return Response({'ok': True, 'message': 'User updated successfully', 'user': serialize_user(user)})


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdmin])
def user_password(request, user_id: int):
    user = accounts.get_user(user_id)
    s = AdminPasswordSerializer(data=request.data, context={'user': user})
    s.is_valid(raise_exception=True)
    accounts.admin_set_password(user.id, s.validated_data['password'])
    return Response({'ok': True, 'message': 'Password updated successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdmin])
def stats(request):
    return Response({'ok': True, **accounts.user_stats()})
