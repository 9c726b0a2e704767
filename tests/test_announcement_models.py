from shared.announcements.models import AnnouncementMessage


def test_from_dict_reads_snake_case_keys():
    message = AnnouncementMessage.from_dict(
        {
            "chat_messages": ["one", None, "three"],
            "center": False,
            "notification": {"title": "T", "subtitle": "S", "icon": "https://x/i.png"},
            "title": {"title": "Big", "subtitle": "small", "is_major": True, "stay": 3},
            "sound": {"sound_name": "ding", "volume": 0.5},
            "priority": 4,
            "enabled": False,
        },
        name="folder/msg",
    )

    assert message.name == "folder/msg"
    assert message.chat_lines == ("one", "", "three")
    assert message.center_chat is False
    assert message.notification.has_icon
    assert message.title.is_major is True
    assert message.title.stay == 3.0
    assert message.title.fade_in == 0.25
    assert message.sound.name == "ding"
    assert message.sound.volume == 0.5
    assert message.sound.pitch == 1.0
    assert message.priority == 4
    assert message.enabled is False


def test_from_dict_accepts_legacy_pascal_case_keys():
    message = AnnouncementMessage.from_dict(
        {
            "ChatMessages": ["hi"],
            "Center": True,
            "Title": {"Title": "A", "Subtitle": "B", "IsMajor": False, "FadeOut": 1},
            "Sound": {"SoundName": "boom", "Pitch": 2},
            "Priority": 2,
            "Enabled": True,
        }
    )

    assert message.chat_lines == ("hi",)
    assert message.title.title == "A"
    assert message.title.fade_out == 1.0
    assert message.sound.name == "boom"
    assert message.sound.pitch == 2.0
    assert message.priority == 2


def test_defaults_for_empty_message():
    message = AnnouncementMessage.from_dict({})

    assert message.chat_lines == ()
    assert message.center_chat is True
    assert message.enabled is True
    assert message.priority == 0
    assert message.has_payload is False


def test_wrong_types_fall_back_to_defaults():
    message = AnnouncementMessage.from_dict(
        {
            "chat_messages": "not a list",
            "enabled": "yes",
            "priority": "high",
            "title": "not an object",
        }
    )

    assert message.chat_lines == ()
    assert message.enabled is True
    assert message.priority == 0
    assert message.title is None


def test_sound_without_name_is_kept_but_not_playable():
    message = AnnouncementMessage.from_dict({"sound": {"volume": 0.3}})

    assert message.sound is not None
    assert message.sound.playable is False
    assert message.has_payload is True
