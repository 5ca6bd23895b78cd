from video_editor.runner import main

main()
