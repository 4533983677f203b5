"""
Static meaning tables for frame header bytes.

Every lookup is total: codes outside the tables resolve to an "unknown" text.
"""

from typing import Dict

UNKNOWN_MAIN_FUNCTION = "未知主功能标识"
UNKNOWN_COMMAND = "未知命令码"
UNKNOWN_STATUS = "未知状态码"

TERMINAL_TO_UNIT = "现场服务终端 ---> 安全单元"
UNIT_TO_TERMINAL = "安全单元 ---> 现场服务终端"

UPGRADE_MAIN_FUNCTION = 0xFE

MAIN_FUNCTION_MEANINGS: Dict[int, str] = {
    0x00: "安全单元自身操作命令",
    0x01: "现场服务终端与管理系统交互类命令",
    0x02: "现场服务终端与电能表的交互命令",
    0x03: "现场服务终端与安全隔离网关交互类命令",
    0x04: "现场服务终端与电子封印的交互命令",
    0x05: "现场服务终端与电子标签的交互命令",
    0x06: "现场服务终端与外设交互命令",
    0xFE: "安全单元升级命令",
}

COMMAND_MEANINGS: Dict[int, Dict[int, str]] = {
    0x00: {
        0x01: "获取安全单元信息",
        0x02: "验证操作员密码",
        0x03: "修改操作员密码",
        0x04: "锁定安全单元",
        0x05: "解锁安全单元",
        0x06: "一次发行安全单元",
        0x07: "二次发行安全单元",
        0x08: "存储关键数据",
        0x09: "读取关键数据",
        0x0A: "透明转发 ESAM 指令",
    },
    0x01: {
        0x01: "获取随机数",
        0x02: "应用层身份认证（非对称密钥协商）",
        0x03: "应用层会话密钥加密算 MAC",
        0x04: "应用层会话密钥解密验 MAC",
        0x05: "转加密初始化",
        0x06: "设置离线计数器",
        0x07: "本地密钥计算 MAC",
        0x08: "本地密钥验证 MAC",
        0x09: "会话密钥计算 MAC",
        0x0A: "会话密钥验证 MAC",
    },
    0x02: {
        0x01: "电能表红外认证（09、13）",
        0x02: "电能表远程身份认证（09、13）",
        0x03: "电能表控制（09、13）",
        0x04: "电能表设参（09、13）",
        0x05: "电能表校时（09、13）",
        0x06: "电能表密钥更新（09）",
        0x07: "电能表密钥更新（13）",
        0x08: "电能表开户充值（09、13）",
        0x09: "698 电能表会话协商",
        0x0A: "698 电能表会话协商验证",
        0x0B: "698 电能表安全数据生成",
        0x0C: "698 电能表安全传输解密",
        0x0D: "698 电能表抄读数据验证",
        0x0E: "698 电能表抄读 ESAM 参数验证",
    },
    0x03: {
        0x01: "链路层身份认证（非对称密钥协商）",
        0x02: "链路层会话密钥加密计算 MAC",
        0x03: "链路层会话密钥解密验证 MAC",
        0x04: "链路层会话密钥计算 MAC",
        0x05: "链路层会话密钥验证 MAC",
    },
    0x04: {
        0x01: "电子封印读认证生成 token1",
        0x02: "电子封印读认证验证 token2",
        0x03: "加密数据地址（读）",
        0x04: "解密读回数据",
        0x05: "电子封印写认证生成 token1",
        0x06: "电子封印写认证验证 token2",
        0x07: "加密数据地址（写）",
        0x08: "加密写数据",
        0x09: "解密执行结果",
        0x0A: "加密密钥更新数据",
    },
    0x05: {
        0x01: "电子标签读认证生成 token1",
        0x02: "电子标签读认证验证 token2",
        0x03: "电子标签 MAC 计算",
        0x04: "电子标签解密",
    },
    0x06: {
        0x01: "外设密钥协商",
        0x02: "外设密钥协商确认",
        0x03: "会话密钥加密计算 MAC",
        0x04: "会话密钥解密验证 MAC",
        0x05: "会话密钥计算 MAC",
        0x06: "会话密钥验证 MAC",
    },
    0xFE: {
        0x01: "升级命令 1",
        0x02: "升级命令 2",
        0x03: "升级命令 3",
        0x04: "指定程序跳转命令",
    },
}

_UPGRADE_FILE_FORMAT = (
    "升级文件格式：\n"
    "|--------------------------------------------------------------------------|\n"
    "| 总块数 N | 检验和 | 数据长度 n1 | 数据密文 1 | ... | 数据长度 nn | 数据密文 N |\n"
    "|  2 字节  | 1 字节 |   2 字节   | n1 个字节  | ... |   2 字节   |  nN 个字节 |\n"
    "|-------------------------------------------------------------------------|"
)


def _upgrade_details(number: int, initiator: str) -> str:
    return f"升级命令 {number}\n\n升级发起方是{initiator}\n\n{_UPGRADE_FILE_FORMAT}"


COMMAND_DETAILS: Dict[int, Dict[int, str]] = {
    0x00: {
        0x01: "本命令获取安全单元工作状态",
        0x02: "本命令验证操作员的密码",
        0x03: "本命令修改操作员的密码",
        0x04: "将 C-ESAM 密码验证次数改为 0",
        0x05: "将 C-ESAM 密码验证次数恢复",
        0x06: "本命令用于安全单元初次发行",
        0x07: "本命令用于配置 ESAM ",
        0x08: "存储关键数据",
        0x09: "读取关键数据",
        0x0A: "往 ESAM 中透传",
    },
    0x01: {
        0x01: "从安全单元指定 ESAM 获取随机数",
        0x02: "加密给定数据",
        0x03: "应用层会话密钥加密数据并计算 MAC",
        0x04: "应用层会话密钥验证 MAC 解密密文",
        0x05: "转加密初始化",
        0x06: "设置安全单元密钥使用次数",
        0x07: "使用本地密钥计算传输 MAC",
        0x08: "使用本地密钥验证传输 MAC",
        0x09: "使用会话密钥计算传输 MAC",
        0x0A: "使用会话密钥验证传输 MAC",
    },
    0x02: {
        0x01: "对电能表进行红外认证",
        0x02: "生成与电能表进行身份认证的密文和随机数",
        0x03: "电能表控制（09、13）",
        0x04: "电能表设参（09、13）",
        0x05: "电能表校时（09、13）",
        0x06: "电能表密钥更新（09）",
        0x07: "电能表密钥更新（13）",
        0x08: "电能表开户充值（09、13）",
        0x09: "698 电能表会话协商",
        0x0A: "698 电能表会话协商验证",
        0x0B: "698 电能表安全数据生成\n注：未设置离线计数器时，验保护码会失败。",
        0x0C: "698 电能表安全传输解密",
        0x0D: "698 电能表抄读数据验证",
        0x0E: "698 电能表抄读 ESAM 参数验证",
    },
    0x03: dict(COMMAND_MEANINGS[0x03]),
    0x04: dict(COMMAND_MEANINGS[0x04]),
    0x05: dict(COMMAND_MEANINGS[0x05]),
    0x06: {
        0x01: "与 W-ESAM 进行密钥协商",
        0x02: "与 W-ESAM 进行密钥协商",
        0x03: "会话密钥加密计算 MAC",
        0x04: "会话密钥解密验证 MAC",
        0x05: "会话密钥计算 MAC",
        0x06: "会话密钥验证 MAC",
    },
    0xFE: {
        0x01: _upgrade_details(1, "现场服务终端"),
        0x02: _upgrade_details(2, "安全单元"),
        0x03: _upgrade_details(3, "安全单元"),
        0x04: "指定程序跳转命令",
    },
}

STATUS_NORMAL = 0x00

GENERAL_STATUS_MEANINGS: Dict[int, str] = {
    0x00: "状态码：安全单元正常响应",
    0xF1: "通用错误码：帧效验错",
    0xF2: "通用错误码：帧长度不符",
    0xF3: "通用错误码：操作员权限不够",
    0xF4: "通用错误码：安全模块错误- 操作员卡操作失败",
    0xF5: "通用错误码：安全模块错误-业务卡操作错误",
    0xF6: "通用错误码：安全单元与业务卡不同步",
    0xF7: "通用错误码：当前仅响应升级命令，只用于红外认证命令",
}

# (F, code) pairs where F4 is a command-specific error, not the general one
F4_COMMAND_SPECIFIC = {(0x01, 0x09), (0x03, 0x04), (0x05, 0x03)}

_ESAM_55 = {
    0x01: "一般错误",
    0x02: "ESAM 没有返回 0x55",
    0x03: "ESAM 返回错误码",
}

_KEY_STATE = {
    0x04: "密钥状态不合法",
    0x05: "打开文件目录失败或获取随机数失败或加密随机数失败",
}

_MAC_DIRECTORY = {
    0x05: "打开文件目录失败",
    0xF4: "计算 MAC 错误",
}

_DATA_LENGTH_RANDOM = {
    0x04: "数据长度不合法",
    0xF4: "解密随机数失败",
}

SPECIFIC_STATUS_MEANINGS: Dict[int, Dict[int, Dict[int, str]]] = {
    0x00: {
        0x01: {
            0x01: "安全单元有问题",
            0x02: "获取 C-ESAM 序列号失败",
            0x03: "获取操作者代码失败",
            0x04: "获取权限和权限掩码失败",
            0x05: "获取操作者信息失败",
            0x06: "获取 Y-ESAM 信息失败",
            0x07: "获取转加密剩余次数失败",
            0x08: "获取密钥版本失败",
            0x09: "获取主站证书失败",
            0x0A: "获取终端证书失败",
        },
        0x02: {
            0x01: "获取密码密文、最大密码尝试次数、剩余密码尝试次数失败",
            0x02: "最大密码尝试次数前后不相等",
            0x03: "剩余密码尝试次数前后不相等",
            0x04: "剩余密码次数为0",
            0x05: "解密密码密文失败，安全单元锁定",
            0x06: "密码尝试次数减1失败",
            0x07: "密码不一致",
            0x08: "恢复最大密码尝试次数失败",
            0x09: "获取 Y-ESAM 序列号失败",
            0x0A: "获取 Y-ESAM 序列号随机数失败",
            0x0B: "加密随机数失败",
            0x0C: "外部认证失败",
        },
        0x03: {
            0x01: "获取密码密文、最大密码尝试次数、剩余密码尝试次数失败",
            0x02: "最大密码尝试次数前后不相等",
            0x03: "剩余密码尝试次数前后不相等",
            0x04: "剩余密码次数为0",
            0x05: "解密密码密文失败",
            0x06: "密码不一致返回剩余密码尝试次数",
            0x07: "恢复最大密码尝试次数失败",
            0x08: "加密明文密码失败",
            0x09: "修改密码失败",
            0x0A: "获取 Y-ESAM 序列号失败",
            0x0B: "获取 Y-ESAM 随机数失败",
            0x0C: "加密随机数失败",
            0x0D: "外部认证失败",
            0x0E: "解密修改后密码密文失败",
            0x0F: "新修改密码和输入密码不一致",
        },
        0x04: {0x01: "外部认证失败", 0x02: "清零失败"},
        0x05: {
            0x01: "外部认证失败",
            0x02: "获取密码尝试次数失败",
            0x03: "修改最大密码尝试次数失败",
            0x04: "加密明文密码失败",
            0x05: "修改操作员密码失败",
        },
        0x06: _ESAM_55,
        0x07: _ESAM_55,
        0x08: {0x01: "存储失败"},
        0x09: {0x01: "读取失败"},
        0x0A: _ESAM_55,
    },
    0x01: {
        0x01: {0x01: "获取随机数失败"},
        0x02: {0x01: "身份认证失败"},
        0x03: {0x01: "计算失败"},
        0x04: {0x01: "计算失败"},
        0x05: {0x01: "转加密初始化失败"},
        0x06: {0x01: "设置离线计数失败"},
        0x07: {0x01: "Y-ESAM 计算失败"},
        0x08: {0x01: "验证失败"},
        0x09: _MAC_DIRECTORY,
        0x0A: {0x01: "验证失败"},
    },
    0x02: {
        0x01: {
            0x01: "从 Y-ESAM 获取随机数密文失败",
            0x02: "从 Y-ESAM 获取的密文与随机数密文1不相等",
            0x03: "从 Y-ESAM 获取随机数密文2失败",
        },
        0x02: {0x01: "Y-ESAM 认证失败", 0x02: "获取随机数失败"},
        0x03: {0x01: "从 Y-ESAM 获取密文和 MAC 失败"},
        0x04: {
            0x01: "数据标识不对",
            0x02: "Y-ESAM 一类设参失败",
            0x03: "Y-ESAM 二类设参失败",
            0x04: "参数类型不对",
        },
        0x05: {
            0x01: "数据标识不对",
            0x02: "数据标识 01 Y-ESAM 获取密文 + MAC 失败",
            0x03: "数据标识 02 Y-ESAM 获取密文 + MAC 失败",
            0x04: "数据标识 0c Y-ESAM 获取密文 + MAC 失败",
        },
        0x06: _KEY_STATE,
        0x07: _KEY_STATE,
        0x08: _KEY_STATE,
        0x09: {0x01: "从 Y-ESAM 协商失败"},
        0x0A: {0x01: "从 Y-ESAM 验证失败"},
        0x0B: {
            0x01: "安全模式字不对",
            0x02: "验证保护码失败",
            0x03: "Y-ESAM 二层加密失败",
            0x04: "Y-ESAM 一层加密失败",
            0x05: "Y-ESAM 获取随机数失败",
        },
        0x0C: {
            0x01: "RESPONSE 不对",
            0x02: "Y-ESAM 解密明文 + MAC 失败",
            0x03: "Y-ESAM 解密密文失败",
            0x04: "Y-ESAM 解密密文 + MAC 失败",
            0x05: "含数据验证信息数据不对",
        },
        0x0D: _KEY_STATE,
        0x0E: {0x04: "Y-ESAM 验证 MAC 失败"},
    },
    0x03: {
        0x01: {0x01: "Y-ESAM 身份认证失败"},
        0x02: {0x01: "Y-ESAM 算 MAC 失败"},
        0x03: {0x01: "Y-ESAM 解密验 MAC 失败"},
        0x04: _DATA_LENGTH_RANDOM,
        0x05: _DATA_LENGTH_RANDOM,
    },
    # 0x85..0x8A only use the general codes
    0x04: {
        0x01: {0x01: "Y-ESAM 电子标签认证失败"},
        0x02: {0x01: "Y-ESAM 电子标签认证失败"},
        0x03: {0x01: "Y-ESAM 加密数据地址失败"},
        0x04: {0x01: "Y-ESAM 解密回读数据失败"},
    },
    0x05: {
        0x01: {0x01: "Y-ESAM 生成明文数据失败", 0x02: "Y-ESAM 生成 Token1 失败"},
        0x02: {0x01: "Y-ESAM 验证 Token2 失败"},
        0x03: _MAC_DIRECTORY,
        0x04: {0x01: "Y-ESAM 解密失败"},
    },
    0x06: {code: _KEY_STATE for code in range(0x01, 0x07)},
    # 0x82 and 0x84 only use the general codes, 0x83 has none
    0xFE: {
        0x01: {0x01: "擦ROM失败", 0x02: "信息存储失败"},
    },
}


def main_function_meaning(main_function: int, is_fe03_special: bool = False) -> str:
    """Label for the F byte"""
    meaning = MAIN_FUNCTION_MEANINGS.get(main_function, UNKNOWN_MAIN_FUNCTION)
    if main_function == UPGRADE_MAIN_FUNCTION and is_fe03_special:
        meaning += f"\n命令类型：升级命令3;\n传输方向: {TERMINAL_TO_UNIT}"
    return "主功能标识：" + meaning


def command_label(main_function: int, command_or_ack: int) -> str:
    """Bare command name for (F, C/A), without direction"""
    commands = COMMAND_MEANINGS.get(main_function)
    if commands is None:
        return UNKNOWN_MAIN_FUNCTION
    return commands.get(command_or_ack & 0x7F, UNKNOWN_COMMAND)


def command_meaning(main_function: int, command_or_ack: int) -> str:
    """Label for the C/A byte including the transfer direction"""
    meaning = command_label(main_function, command_or_ack)
    code = command_or_ack & 0x7F
    upgrade = main_function == UPGRADE_MAIN_FUNCTION

    if not command_or_ack & 0x80:
        # Upgrade commands 2 and 3 are initiated by the security unit
        direction = UNIT_TO_TERMINAL if upgrade and code in (0x02, 0x03) else TERMINAL_TO_UNIT
        return f"命令类型：{meaning}\n传输方向: {direction}"

    # The terminal answers upgrade command 2
    direction = TERMINAL_TO_UNIT if upgrade and command_or_ack == 0x82 else UNIT_TO_TERMINAL
    return f"命令类型：{meaning};\n传输方向: {direction}"


def command_details(main_function: int, command_or_ack: int) -> str:
    """Long description for (F, C/A)"""
    details = COMMAND_DETAILS.get(main_function)
    if details is None:
        return UNKNOWN_MAIN_FUNCTION
    return details.get(command_or_ack & 0x7F, UNKNOWN_COMMAND)


def status_meaning(main_function: int, ack: int, status: int) -> str:
    """Label for the S byte of an acknowledgement frame"""
    code = ack & 0x7F
    general = GENERAL_STATUS_MEANINGS.get(status)
    if general is not None and not (status == 0xF4 and (main_function, code) in F4_COMMAND_SPECIFIC):
        return general

    commands = SPECIFIC_STATUS_MEANINGS.get(main_function)
    if commands is None:
        meaning = UNKNOWN_MAIN_FUNCTION
    elif code not in commands:
        meaning = UNKNOWN_COMMAND
    else:
        meaning = commands[code].get(status, UNKNOWN_STATUS)
    return f"异常响应状态码：{meaning}"
