"""商店 API 路由。"""
