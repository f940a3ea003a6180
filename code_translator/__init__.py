"""
/**
 * @file code_translator/__init__.py
 * @description 代码翻译服务包。
 */
"""
