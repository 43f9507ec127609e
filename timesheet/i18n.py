from .constants import Label

# English is the key; add a language code to each entry to support more languages
LABELS = {
    Label.APP_NAME: {'ja': 'タイムシート'},
    Label.WORK: {'ja': '勤務'},
    Label.OVERTIME_WORK: {'ja': '時間外'},
    Label.NIGHT_SHIFT_WORK: {'ja': '深夜'},
    Label.BREAK_TIME: {'ja': '休憩'},
    Label.TIME_OFF: {'ja': '休暇'},
    Label.HOLIDAY: {'ja': '祝日'},
    Label.LIFELOG: {'ja': 'ライフログ'},
    Label.NUM_OF_WORKING_DAYS: {'ja': '出勤日数'},
    Label.MONTHLY_REPORT: {'ja': '月次レポート'},
    Label.PROJECT_SUMMARY: {'ja': 'プロジェクト'},
    Label.LIFELOG_SUMMARY: {'ja': 'ライフログ'},
    Label.DAYS: {'ja': '日'},
    Label.HOURS: {'ja': '時間'},
    Label.MINUTES: {'ja': '分'},
    Label.DAY: {'ja': '日'},
    Label.HOUR: {'ja': '時間'},
    Label.MINUTE: {'ja': '分'},
    Label.JAPAN: {'ja': '日本'},
    Label.UNITED_STATES: {'ja': 'アメリカ合衆国'},
    Label.HERE_IS_THE_REPORT_YOU_REQUESTED: {'ja': 'こちらがご希望の月次レポートです！'},
    Label.REPORT_HAS_BEEN_SENT_IN_DM: {'ja': ':wave: 作成したレポートを DM でお送りしました！'},
    Label.FAILED_TO_GENERATE_REPORT: {
        'ja': ':x: レポートの作成に失敗しました。このアプリのメンテナーにご連絡ください。'
    },
    Label.ADMIN_ONLY: {'ja': 'このコマンドは管理者のみ利用できます。'},
    Label.NO_ENTRIES_YET: {'ja': 'まだ入力がありません。'},
    Label.INVALID_START_AND_END: {'ja': '開始と終了の時刻の組み合わせが不正です'},
    Label.INVALID_TIME_FORMAT: {'ja': '時刻は HH:MM 形式で入力してください'},
    Label.CONFLICT_ERROR_MESSAGE: {'ja': '入力済の時間帯と重複しています'},
    Label.TOO_LONG_INPUT: {'ja': '入力が長すぎます'},
    Label.PROJECT_CODE_TEXT_VALIDATION_ERROR: {
        'ja': "コードには英数字か '-', '_' のみを使用できます"
    },
    Label.CODE_ALREADY_EXISTS: {'ja': 'このコードはすでに存在しています'},
    Label.MANUAL_ENTRY_RESTRICTED: {'ja': '組織のポリシーにより手入力は制限されています'},
    Label.LABOR_LAW_OF_JAPAN_BREAK_TIME_FOR_6_WORK_HOURS: {
        'ja': '労働時間が 6 時間を超える場合 45 分間の休憩をとることができます。'
    },
    Label.LABOR_LAW_OF_JAPAN_BREAK_TIME_FOR_8_WORK_HOURS: {
        'ja': '労働時間が 8 時間を超える場合 1 時間の休憩をとることができます。'
    },
}


def i18n(english, language):
    """Translate an English label, falling back to English when no translation exists"""
    translations = LABELS.get(english)
    if translations and translations.get(language):
        return translations[language]
    return english
