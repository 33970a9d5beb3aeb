"""核心业务组件：凭据、身份、Token、鉴权与各类台账。"""
