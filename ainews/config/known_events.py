"""
Curated AI conferences

Conference pages rarely expose machine-readable schedules, so the major ones
are maintained by hand. Entries outside a one-year window around today are
ignored by the known-events fetcher.
"""

KNOWN_EVENTS = [
    {
        "name": "2026 世界人工智能大会 (WAIC)",
        "description": "世界人工智能大会，聚焦大模型、具身智能与产业应用",
        "start_date": "2026-07-26",
        "end_date": "2026-07-28",
        "location": "上海世博中心",
        "type": "offline",
        "region": "domestic",
        "url": "https://www.worldaic.com.cn/",
        "registration_url": "https://www.worldaic.com.cn/",
        "speakers": "产业领袖、学术专家",
        "agenda": "开幕式、主论坛、专题论坛、展览",
        "expected_attendees": 30000,
    },
    {
        "name": "CCAI 2026 中国人工智能大会",
        "description": "中国人工智能学会主办的年度学术与产业大会",
        "start_date": "2026-08-20",
        "end_date": "2026-08-22",
        "location": "北京",
        "type": "offline",
        "region": "domestic",
        "url": "https://ccai.caai.cn/",
        "registration_url": "https://ccai.caai.cn/",
        "speakers": "国内外顶级AI专家",
        "agenda": "学术报告、工业论坛、竞赛展示",
        "expected_attendees": 8000,
    },
    {
        "name": "2026 AI 开源社区大会",
        "description": "开源AI项目的发展和社区建设",
        "start_date": "2026-11-18",
        "end_date": "2026-11-19",
        "location": "线上",
        "type": "online",
        "region": "domestic",
        "url": "https://www.huodongxing.com/",
        "registration_url": "https://www.huodongxing.com/",
        "speakers": "开源项目维护者、社区领袖",
        "agenda": "项目分享、技术讨论、社区建设",
        "expected_attendees": 5000,
    },
    {
        "name": "CVPR 2026",
        "description": "IEEE/CVF Conference on Computer Vision and Pattern Recognition",
        "start_date": "2026-06-03",
        "end_date": "2026-06-07",
        "location": "Denver, CO, USA",
        "type": "offline",
        "region": "international",
        "url": "https://cvpr.thecvf.com/",
        "registration_url": "https://cvpr.thecvf.com/",
        "agenda": "Workshops, tutorials, main conference",
    },
    {
        "name": "ICML 2026",
        "description": "International Conference on Machine Learning",
        "start_date": "2026-07-06",
        "end_date": "2026-07-11",
        "location": "Seoul, South Korea",
        "type": "offline",
        "region": "international",
        "url": "https://icml.cc/",
        "registration_url": "https://icml.cc/",
    },
    {
        "name": "NeurIPS 2026",
        "description": "Conference on Neural Information Processing Systems",
        "start_date": "2026-12-06",
        "end_date": "2026-12-12",
        "location": "Sydney, Australia",
        "type": "offline",
        "region": "international",
        "url": "https://neurips.cc/",
        "registration_url": "https://neurips.cc/",
    },
    {
        "name": "AAAI 2027",
        "description": "AAAI Conference on Artificial Intelligence",
        "start_date": "2027-02-23",
        "end_date": "2027-03-02",
        "location": "Montréal, Canada",
        "type": "offline",
        "region": "international",
        "url": "https://aaai.org/conference/aaai/",
        "registration_url": "https://aaai.org/conference/aaai/",
    },
    {
        "name": "ICLR 2027",
        "description": "International Conference on Learning Representations",
        "start_date": "2027-04-24",
        "end_date": "2027-04-28",
        "location": "Rio de Janeiro, Brazil",
        "type": "offline",
        "region": "international",
        "url": "https://iclr.cc/",
        "registration_url": "https://iclr.cc/",
    },
    {
        "name": "AI Engineer World's Fair 2026",
        "description": "Conference for engineers building with LLMs and agents",
        "start_date": "2026-06-30",
        "end_date": "2026-07-02",
        "location": "San Francisco, CA, USA",
        "type": "offline",
        "region": "international",
        "url": "https://www.ai.engineer/",
        "registration_url": "https://www.ai.engineer/",
    },
    {
        "name": "Hugging Face Open Source AI Webinar Series",
        "description": "Virtual sessions on open models, datasets and tooling",
        "start_date": "2026-11-05",
        "location": "Online",
        "type": "online",
        "region": "international",
        "url": "https://huggingface.co/events",
        "registration_url": "https://huggingface.co/events",
    },
]
