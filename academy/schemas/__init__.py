"""请求/响应模型。"""
