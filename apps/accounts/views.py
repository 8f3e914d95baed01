# Django 기본
from django.shortcuts import redirect
from django.urls import reverse_lazy

# Django 인증 관련
from django.contrib.auth.views import (
    LoginView as DjangoLoginView,
    LogoutView as DjangoLogoutView,
)

import logging

logger = logging.getLogger(__name__)


class UserLoginView(DjangoLoginView):
    """사용자 로그인"""
    template_name = "accounts/login.html"
    redirect_authenticated_user = True
    next_page = reverse_lazy("dashboard:index")

    def form_valid(self, form):
        response = super().form_valid(form)
        logger.info(f"로그인: {self.request.user.username} (ID: {self.request.user.id})")
        return response


class UserLogoutView(DjangoLogoutView):
    """사용자 로그아웃"""
    next_page = reverse_lazy("accounts:login")


def home(request):
    """
    루트 접속 시 분기
    - 로그인 상태: 대시보드
    - 비로그인: 로그인 페이지
    """
    if request.user.is_authenticated:
        return redirect('dashboard:index')
    return redirect('accounts:login')
