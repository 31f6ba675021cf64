"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- 狀態機：集中管理所有階段轉換
- RoundController：管理回合的完整生命週期
- RugPullScheduler：rug pull 與時間上限的競賽
- Timers：計時器登記與 round token
"""
