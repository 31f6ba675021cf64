"""
API 層

這個 package 只負責 HTTP 介面，不包含業務邏輯：
- rounds：回合快照、圖表 frame、固定常數
"""
