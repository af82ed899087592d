"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- AccessControl：owner / admin 權限
- EscrowLedger：Game 的建立、接受、結算
- 狀態機：集中管理 Game 的狀態轉換
- Events：持久化事件紀錄與 commit 後通知
- Locks：並發控制工具
- EscrowService：對外的唯一入口
"""
