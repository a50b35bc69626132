from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import Group
from django.utils.html import format_html
from django.urls import reverse
from .models import (
    User, Follow, FriendRequest, Friendship, Notification, Message,
    Conversation, ConversationMember
)

# ==================== ADMIN CLASSES ====================

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'external_id', 'email', 'is_staff', 'date_joined')
    search_fields = ('username', 'email', 'external_id')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {'fields': ('external_id', 'profile_image', 'bio', 'timezone')}),
    )
    actions = ['activate_users', 'deactivate_users']

    def activate_users(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f"{count} users activated")
    activate_users.short_description = "Activate selected users"

    def deactivate_users(self, request, queryset):
        count = queryset.update(is_active=False)
        self.message_user(request, f"{count} users deactivated")
    deactivate_users.short_description = "Deactivate selected users"

@admin.register(Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ('id', 'follower', 'followed', 'created_at')
    search_fields = ('follower__username', 'followed__username')

@admin.register(FriendRequest)
class FriendRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'sender', 'receiver', 'status', 'created_at', 'updated_at')
    list_filter = ('status', 'created_at')
    search_fields = ('sender__username', 'receiver__username')

@admin.register(Friendship)
class FriendshipAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'friend', 'created_at')
    search_fields = ('user__username', 'friend__username')

@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'actor', 'type', 'title', 'created_at', 'is_read')
    list_filter = ('type', 'is_read', 'created_at')
    search_fields = ('user__username', 'actor__username', 'message')

@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'conversation_link', 'sender', 'timestamp', 'content_short', 'is_deleted')
    list_filter = ('is_deleted', 'timestamp')
    search_fields = ('content', 'sender__username')

    def conversation_link(self, obj):
        url = reverse("admin:social_conversation_change", args=[obj.conversation_id])
        return format_html('<a href="{}">{}</a>', url, obj.conversation)
    conversation_link.short_description = 'Conversation'
    conversation_link.admin_order_field = 'conversation__updated_at'

    def content_short(self, obj):
        if obj.content:
            return obj.content[:50] + '...' if len(obj.content) > 50 else obj.content
        return "(media)"
    content_short.short_description = 'Content'

@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'is_group', 'pair_key', 'created_by', 'updated_at', 'member_count')
    list_filter = ('is_group', 'created_at')
    search_fields = ('name', 'pair_key', 'created_by__username')

    def member_count(self, obj):
        return obj.members.count()
    member_count.short_description = 'Members'

@admin.register(ConversationMember)
class ConversationMemberAdmin(admin.ModelAdmin):
    list_display = ('id', 'conversation', 'user', 'joined_at', 'last_read_at', 'is_admin')
    list_filter = ('is_admin', 'joined_at')
    search_fields = ('conversation__name', 'user__username')

# Unregister Django's default Group
admin.site.unregister(Group)

# Basic admin site configuration
admin.site.site_header = "Arena Social Admin"
admin.site.site_title = "Arena Social Admin Portal"
admin.site.index_title = "Welcome"
